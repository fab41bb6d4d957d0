from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from common.errors import ConfigError
from common.logger import get_logger
from ingestion.document_models import StoredChunk
from retrieval.similarity import cosine_scores, top_k_indices
from vectorstore.embedding_codec import deserialize_embedding
from vectorstore.sqlite_store import ContentStore

log = get_logger(__name__)


@dataclass(frozen=True)
class ScoredChunk:
    chunk: StoredChunk
    similarity: float


class ExactRetriever:
    """
    Brute-force top-k search by cosine similarity over every stored chunk.

    Cost is O(N*D) per query: every embedding is loaded and scored, there is
    no index. Swapping in an approximate index would change the result
    contract (exact top-k), not just the speed.
    """

    def __init__(self, store: ContentStore, k: int = 5):
        if k <= 0:
            raise ValueError("k must be positive")
        self.store = store
        self.k = k

    def retrieve(self, query_embedding: Sequence[float], k: int | None = None) -> List[ScoredChunk]:
        k = self.k if k is None else k
        if k <= 0:
            raise ValueError("k must be positive")
        chunks = self.store.load_chunks()
        if not chunks:
            log.info("Store has no chunks.")
            return []

        dim = len(query_embedding)
        vectors = []
        for c in chunks:
            vec = deserialize_embedding(c.embedding)
            if len(vec) != dim:
                raise ConfigError(
                    f"Query embedding has dimension {dim} but chunk {c.id} has "
                    f"dimension {len(vec)}; the embedding model does not match the store."
                )
            vectors.append(vec)

        scores = cosine_scores(query_embedding, np.vstack(vectors))
        selected = [
            ScoredChunk(chunk=chunks[i], similarity=float(scores[i]))
            for i in top_k_indices(scores, k)
        ]
        log.info("Found %d relevant chunks (searched %d).", len(selected), len(chunks))
        return selected

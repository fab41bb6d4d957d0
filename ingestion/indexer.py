from __future__ import annotations

from typing import List, Optional, Sequence

from tqdm import tqdm

from common.errors import ConfigError
from common.logger import get_logger
from ingestion.document_models import TextChunk
from models.embeddings import EmbeddingProvider
from vectorstore.embedding_codec import serialize_embedding
from vectorstore.sqlite_store import ContentStore

log = get_logger(__name__)


def index_chunks(
    store: ContentStore,
    embedder: EmbeddingProvider,
    chunks: Sequence[TextChunk],
    show_progress: bool = True,
) -> int:
    """
    Embed every chunk and insert it, all inside one transaction.

    Any failure (provider error, dimension mismatch, insert error) rolls the
    whole batch back, so no document is left with a partial chunk set.
    The transaction stays open across the embedding calls.
    """
    if not chunks:
        log.info("No chunks to index.")
        return 0

    log.info("Starting chunk indexing process for %d chunks...", len(chunks))
    expected_dim: Optional[int] = store.embedding_dimension()
    iterator = tqdm(chunks, desc="Embedding chunks", unit="chunk") if show_progress else chunks

    with store.transaction() as session:
        for chunk in iterator:
            vector: List[float] = embedder.embed(chunk.text)
            if expected_dim is None:
                expected_dim = len(vector)
            elif len(vector) != expected_dim:
                raise ConfigError(
                    f"Embedding dimension {len(vector)} does not match the store's "
                    f"dimension {expected_dim}; was the embedding model changed?"
                )
            store.add_chunk(
                session,
                document_id=chunk.document_id,
                text=chunk.text,
                embedding=serialize_embedding(vector),
            )

    log.info("Successfully indexed %d chunks into the database.", len(chunks))
    return len(chunks)

from __future__ import annotations

from typing import List, Optional

from langchain_core.embeddings import Embeddings
from langchain_ollama import OllamaEmbeddings

from common.config import EmbeddingConfig
from common.errors import ConfigError, ProviderError
from common.logger import get_logger

log = get_logger(__name__)


class EmbeddingProvider:
    """
    Turns text into a fixed-dimension vector through a LangChain Embeddings backend.
    Backend failures and empty responses surface as ProviderError.
    """

    def __init__(self, embeddings: Embeddings, dimension: Optional[int] = None):
        self.embeddings = embeddings
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        try:
            vector = self.embeddings.embed_query(text)
        except Exception as e:
            raise ProviderError(f"Embedding request failed: {e}") from e

        if vector is None or len(vector) == 0:
            raise ProviderError("Embedding response did not contain any vector data.")
        if self.dimension is not None and len(vector) != self.dimension:
            raise ConfigError(
                f"Embedding dimension {len(vector)} does not match configured "
                f"dimension {self.dimension}"
            )
        return [float(x) for x in vector]


def load_embeddings(cfg: EmbeddingConfig, base_url: Optional[str] = None) -> Embeddings:
    if cfg.provider == "ollama":
        kwargs = {"model": cfg.model_name}
        if base_url:
            kwargs["base_url"] = base_url
        return OllamaEmbeddings(**kwargs)
    if cfg.provider == "huggingface":
        # optional extra; pulls in sentence-transformers
        from langchain_huggingface.embeddings import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=cfg.model_name)
    raise ConfigError(f"Unsupported embedding provider: {cfg.provider}")


def load_embedding_provider(
    cfg: EmbeddingConfig, base_url: Optional[str] = None
) -> EmbeddingProvider:
    log.info("Using %s embeddings (%s)", cfg.provider, cfg.model_name)
    return EmbeddingProvider(load_embeddings(cfg, base_url), dimension=cfg.dimension)

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

from common.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


class AppConfig(BaseModel):
    data_dir: Path = Path("data/docs")
    cache_dir: Path = Path("data/cache")
    database_url: str | None = None

    allowed_exts: tuple[str, ...] = (".pdf", ".txt", ".md")
    max_pdf_pages: int | None = Field(default=None, gt=0)
    write_manifest: bool = True
    show_progress: bool = True


class EmbeddingConfig(BaseModel):
    provider: str = Field(default="ollama", pattern="^(ollama|huggingface)$")
    model_name: str = "nomic-embed-text"
    # None = accept whatever the provider returns, as long as it stays constant
    dimension: int | None = Field(default=None, gt=0)


class ChunkingConfig(BaseModel):
    mode: str = Field(default="recursive", pattern="^(recursive|sentence)$")
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _overlap_below_size(self) -> "ChunkingConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self


class RetrievalConfig(BaseModel):
    k: int = Field(default=5, gt=0)


class LLMConfig(BaseModel):
    provider: str = Field(default="ollama", pattern="^ollama$")
    model_name: str = "mistral"
    temperature: float = 0.2


class KnowledgeEngineConfig(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    embeddings: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    llm_qa: LLMConfig = Field(default_factory=LLMConfig)
    ollama_base_url: str | None = None


class Secrets(BaseSettings):
    database_url: str | None = None
    ollama_base_url: str | None = None

    class Config:
        env_file = ".env"
        extra = "ignore"


def load_yaml_config(path: Path = DEFAULT_CONFIG_PATH) -> KnowledgeEngineConfig:
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    try:
        return KnowledgeEngineConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def load_config(
    path: Path = DEFAULT_CONFIG_PATH, secrets: Secrets | None = None
) -> KnowledgeEngineConfig:
    """
    Load the YAML config and apply environment overrides (.env / process env).
    DATABASE_URL wins over app.database_url; one of them must be set.
    """
    cfg = load_yaml_config(path)
    secrets = secrets or Secrets()

    database_url = secrets.database_url or cfg.app.database_url
    if not database_url:
        raise ConfigError(
            "DATABASE_URL must be set (environment, .env or app.database_url)"
        )

    return cfg.model_copy(
        update={
            "app": cfg.app.model_copy(update={"database_url": database_url}),
            "ollama_base_url": secrets.ollama_base_url or cfg.ollama_base_url,
        }
    )

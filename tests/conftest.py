import re
from typing import List

import pytest
from langchain_core.embeddings import Embeddings

from common.config import AppConfig, KnowledgeEngineConfig
from models.embeddings import EmbeddingProvider
from vectorstore.sqlite_store import ContentStore

VOCAB = ["apple", "banana", "cherry", "engine", "rocket", "ocean"]


class KeywordEmbeddings(Embeddings):
    """Counts vocabulary words: texts sharing keywords point the same way."""

    def __init__(self, vocab: List[str] = VOCAB, fail_on_call: int | None = None):
        self.vocab = vocab
        self.fail_on_call = fail_on_call
        self.calls = 0

    def _vector(self, text: str) -> List[float]:
        self.calls += 1
        if self.fail_on_call is not None and self.calls == self.fail_on_call:
            raise ConnectionError("embedding service unavailable")
        words = re.findall(r"[a-z]+", text.lower())
        return [float(words.count(w)) for w in self.vocab]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> List[float]:
        return self._vector(text)


class RecordingLLM:
    """Stands in for GenerativeProvider and remembers every prompt."""

    def __init__(self, reply: str = "Apples are red."):
        self.reply = reply
        self.calls = []

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self.reply


@pytest.fixture
def store(tmp_path):
    s = ContentStore(f"sqlite:///{tmp_path / 'knowledge.db'}")
    yield s
    s.close()


@pytest.fixture
def keyword_embeddings():
    return KeywordEmbeddings()


@pytest.fixture
def embedder(keyword_embeddings):
    return EmbeddingProvider(keyword_embeddings)


@pytest.fixture
def config(tmp_path):
    return KnowledgeEngineConfig(
        app=AppConfig(
            data_dir=tmp_path / "docs",
            cache_dir=tmp_path / "cache",
            database_url=f"sqlite:///{tmp_path / 'knowledge.db'}",
            show_progress=False,
        )
    )


@pytest.fixture
def docs_dir(tmp_path):
    d = tmp_path / "docs"
    d.mkdir()
    (d / "fruit.txt").write_text("The apple is red. A banana is yellow.")
    (d / "space.md").write_text("# Rockets\n\nA rocket engine burns fuel.")
    return d

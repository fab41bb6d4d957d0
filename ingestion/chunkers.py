from __future__ import annotations

from typing import Iterable, List

import nltk
from langchain_text_splitters import RecursiveCharacterTextSplitter
from nltk.tokenize import sent_tokenize

from common.config import ChunkingConfig
from common.errors import ConfigError
from common.logger import get_logger
from ingestion.document_models import SourceDocument, TextChunk

log = get_logger(__name__)

SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def chunk_documents(
    docs: Iterable[SourceDocument], cfg: ChunkingConfig
) -> List[TextChunk]:
    """
    Split every document into chunks, preserving document order and the
    order of chunks within each document.
    """
    out: List[TextChunk] = []
    n_docs = 0
    for d in docs:
        pieces = chunk_text(d.text, cfg)
        out.extend(TextChunk(document_id=d.id, text=p) for p in pieces)
        log.info("Split document '%s' (ID: %d) into %d chunks.", d.path, d.id, len(pieces))
        n_docs += 1
    log.info("Chunking complete: %d chunks from %d documents", len(out), n_docs)
    return out


def chunk_text(text: str, cfg: ChunkingConfig) -> List[str]:
    """
    Deterministic split into trimmed, non-empty pieces of at most cfg.chunk_size characters.
    """
    if cfg.mode == "sentence":
        pieces = _sentence_chunks(text, cfg)
    else:
        pieces = _recursive_chunks(text, cfg.chunk_size, cfg.chunk_overlap)
    return [p for p in (p.strip() for p in pieces) if p]


def _splitter(chunk_size: int, chunk_overlap: int) -> RecursiveCharacterTextSplitter:
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=SEPARATORS,
        length_function=len,
        strip_whitespace=True,
    )


def _recursive_chunks(text: str, chunk_size: int, chunk_overlap: int) -> List[str]:
    return _splitter(chunk_size, chunk_overlap).split_text(text)


def _ensure_punkt() -> None:
    try:
        nltk.data.find("tokenizers/punkt_tab")
    except LookupError:
        if not nltk.download("punkt_tab", quiet=True):
            raise ConfigError(
                "NLTK punkt_tab data unavailable; install it with "
                "`python -m nltk.downloader punkt_tab` or use chunking.mode=recursive"
            )


def _sentence_chunks(text: str, cfg: ChunkingConfig) -> List[str]:
    """
    Pack whole sentences until the next one would overflow chunk_size.
    Sentences longer than chunk_size fall back to the recursive splitter.
    Overlap carries the tail of the previous chunk when it still fits.
    """
    _ensure_punkt()
    max_len = cfg.chunk_size
    overlap = cfg.chunk_overlap

    out: List[str] = []
    buf: List[str] = []
    buf_len = 0

    def flush() -> str:
        piece = " ".join(buf).strip()
        if piece:
            out.append(piece)
        return piece

    try:
        sentences = sent_tokenize(text)
    except LookupError as e:
        raise ConfigError(f"NLTK sentence tokenizer data unavailable: {e}") from e

    for s in sentences:
        s = s.strip()
        if not s:
            continue
        if len(s) > max_len:
            flush()
            buf, buf_len = [], 0
            out.extend(_recursive_chunks(s, max_len, 0))
            continue

        needed = len(s) if not buf else buf_len + 1 + len(s)
        if needed <= max_len:
            buf.append(s)
            buf_len = needed
            continue

        piece = flush()
        carry = piece[-overlap:].strip() if overlap > 0 else ""
        if carry and len(carry) + 1 + len(s) <= max_len:
            buf = [carry, s]
            buf_len = len(carry) + 1 + len(s)
        else:
            buf = [s]
            buf_len = len(s)

    flush()
    return out

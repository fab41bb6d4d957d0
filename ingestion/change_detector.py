from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from common.errors import ConfigError, ExtractionError
from common.logger import get_logger
from ingestion.document_models import ChangeStatus, SourceDocument
from ingestion.hash_utils import sha256_text
from ingestion.loaders import discover_files, extract_text
from vectorstore.sqlite_store import ContentStore

log = get_logger(__name__)


@dataclass(frozen=True)
class ScanEvent:
    path: Path
    status: Optional[ChangeStatus]  # None = skipped (extraction failed)
    document: Optional[SourceDocument] = None


def scan_documents(
    store: ContentStore,
    root: Path,
    allowed_exts: Iterable[str] = (".pdf", ".txt", ".md"),
    max_pdf_pages: int | None = None,
) -> Iterator[ScanEvent]:
    """
    Classify every file under root against the store, one file at a time.

    New and modified documents are written to the store right away (the
    document row for new files, fingerprint update plus chunk removal for
    modified ones). Their chunks are rebuilt later by the indexer.
    """
    if not root.is_dir():
        raise ConfigError(f"Input directory does not exist: {root}")

    allowed_exts = tuple(allowed_exts)
    for path in discover_files(root):
        try:
            text = extract_text(path, allowed_exts=allowed_exts, max_pdf_pages=max_pdf_pages)
        except ExtractionError as e:
            log.warning("Skipping %s: %s", path, e)
            yield ScanEvent(path=path, status=None)
            continue

        yield _classify(store, path, text)


def _classify(store: ContentStore, path: Path, text: str) -> ScanEvent:
    content_hash = sha256_text(text)
    source_path = str(path.resolve())
    existing = store.get_document_by_path(source_path)

    if existing is None:
        record = store.create_document(source_path, content_hash)
        log.info("Ingesting new document: '%s'", path)
        status = ChangeStatus.NEW
    elif existing.content_hash == content_hash:
        log.debug("Unchanged, skipping: '%s'", path)
        return ScanEvent(path=path, status=ChangeStatus.UNCHANGED)
    else:
        removed = store.replace_fingerprint(existing.id, content_hash)
        log.warning(
            "Document '%s' has changed and will be re-ingested (%d old chunks removed).",
            path,
            removed,
        )
        record = existing
        status = ChangeStatus.MODIFIED

    doc = SourceDocument(
        id=record.id,
        path=path,
        text=text,
        content_hash=content_hash,
        status=status,
    )
    return ScanEvent(path=path, status=status, document=doc)


def ingest_documents(
    store: ContentStore,
    root: Path,
    allowed_exts: Iterable[str] = (".pdf", ".txt", ".md"),
    max_pdf_pages: int | None = None,
) -> List[SourceDocument]:
    """Documents under root that need (re)chunking and (re)indexing, in discovery order."""
    log.info("Starting document ingestion from '%s'...", root)
    docs = [
        ev.document
        for ev in scan_documents(store, root, allowed_exts, max_pdf_pages)
        if ev.document is not None
    ]
    log.info("Found %d new or updated documents to process.", len(docs))
    return docs

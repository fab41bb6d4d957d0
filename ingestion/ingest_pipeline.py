from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import orjson

from common.config import KnowledgeEngineConfig
from common.logger import get_logger
from ingestion.change_detector import scan_documents
from ingestion.chunkers import chunk_documents
from ingestion.document_models import ChangeStatus, SourceDocument, TextChunk
from ingestion.indexer import index_chunks
from models.embeddings import EmbeddingProvider
from vectorstore.sqlite_store import ContentStore

log = get_logger(__name__)


@dataclass
class IngestReport:
    files_seen: int = 0
    new: int = 0
    modified: int = 0
    unchanged: int = 0
    skipped: int = 0
    chunks_indexed: int = 0
    documents: List[SourceDocument] = field(default_factory=list)

    @property
    def documents_processed(self) -> int:
        return len(self.documents)


def ingest_folder(
    input_dir: Path,
    config: KnowledgeEngineConfig,
    store: ContentStore,
    embedder: EmbeddingProvider,
) -> IngestReport:
    """
    Incremental ingestion of a folder:
    - Detects new / modified / unchanged files by content fingerprint
    - Chunks the documents that need (re)processing
    - Embeds and stores all chunks in a single transaction
    - Writes a manifest JSON of the processed documents
    """
    app = config.app
    report = IngestReport()
    counts: Counter = Counter()

    log.info("Starting document ingestion from '%s'...", input_dir)
    for ev in scan_documents(store, input_dir, app.allowed_exts, app.max_pdf_pages):
        report.files_seen += 1
        counts[ev.status] += 1
        if ev.document is not None:
            report.documents.append(ev.document)

    report.new = counts[ChangeStatus.NEW]
    report.modified = counts[ChangeStatus.MODIFIED]
    report.unchanged = counts[ChangeStatus.UNCHANGED]
    report.skipped = counts[None]
    log.info(
        "Discovered %d files: %d new, %d modified, %d unchanged, %d skipped",
        report.files_seen,
        report.new,
        report.modified,
        report.unchanged,
        report.skipped,
    )

    if not report.documents:
        log.info("No new or updated documents to process.")
        return report

    chunks = chunk_documents(report.documents, config.chunking)
    report.chunks_indexed = index_chunks(
        store, embedder, chunks, show_progress=app.show_progress
    )

    if app.write_manifest:
        write_manifest(report.documents, chunks, app.cache_dir / "manifest_ingest.json")

    log.info("Ingestion process completed successfully.")
    return report


def write_manifest(
    documents: List[SourceDocument], chunks: List[TextChunk], out: Path
) -> Path:
    per_doc = Counter(c.document_id for c in chunks)
    manifest = [
        {
            "document_id": d.id,
            "path": str(d.path),
            "status": d.status.value,
            "content_hash": d.content_hash,
            "chunks": per_doc[d.id],
            "len": len(d.text),
        }
        for d in documents
    ]
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(orjson.dumps(manifest, option=orjson.OPT_INDENT_2))
    log.info("Wrote manifest to %s", out)
    return out

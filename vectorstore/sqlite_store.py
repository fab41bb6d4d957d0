from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, delete, event, func, select, update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from common.logger import get_logger
from ingestion.document_models import DocumentRecord, StoredChunk
from vectorstore.embedding_codec import embedding_dimension
from vectorstore.schema import Base, ChunkRow, DocumentRow

log = get_logger(__name__)


def _create_engine(database_url: str, echo: bool = False) -> Engine:
    url = make_url(database_url)
    kwargs = {"echo": echo}
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            # one shared connection, otherwise every checkout sees an empty db
            kwargs.update(
                poolclass=StaticPool, connect_args={"check_same_thread": False}
            )
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, **kwargs)

    if url.get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def _to_record(row: DocumentRow) -> DocumentRecord:
    return DocumentRecord(id=row.id, path=row.file_path, content_hash=row.content_hash)


class ContentStore:
    """
    Persistent record of known documents and their embedded chunks.

    Document writes commit immediately. Chunk inserts go through transaction()
    so a whole indexing batch is committed or rolled back as one unit.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self._engine = _create_engine(database_url, echo=echo)
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )
        self.init_schema()

    def init_schema(self) -> None:
        """Create missing tables. Safe to run on every start-up."""
        Base.metadata.create_all(bind=self._engine)
        log.debug("Schema ready at %s", self._engine.url)

    def close(self) -> None:
        self._engine.dispose()

    def __enter__(self) -> "ContentStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --- documents -------------------------------------------------------

    def get_document_by_path(self, path: str) -> Optional[DocumentRecord]:
        with self._session_factory() as session:
            row = session.scalars(
                select(DocumentRow).where(DocumentRow.file_path == path)
            ).one_or_none()
            return _to_record(row) if row else None

    def create_document(self, path: str, content_hash: str) -> DocumentRecord:
        with self._session_factory.begin() as session:
            row = DocumentRow(file_path=path, content_hash=content_hash)
            session.add(row)
            session.flush()
            return _to_record(row)

    def replace_fingerprint(self, document_id: int, content_hash: str) -> int:
        """
        Store a new fingerprint and drop every chunk of the document.
        Returns the number of chunks removed.
        """
        with self._session_factory.begin() as session:
            removed = session.execute(
                delete(ChunkRow).where(ChunkRow.document_id == document_id)
            ).rowcount
            session.execute(
                update(DocumentRow)
                .where(DocumentRow.id == document_id)
                .values(content_hash=content_hash)
            )
        return removed or 0

    def list_documents(self) -> List[DocumentRecord]:
        with self._session_factory() as session:
            rows = session.scalars(select(DocumentRow).order_by(DocumentRow.id))
            return [_to_record(r) for r in rows]

    def count_documents(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(DocumentRow)) or 0

    # --- chunks ----------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on normal exit, roll back and re-raise on any exception."""
        with self._session_factory.begin() as session:
            yield session

    def add_chunk(
        self, session: Session, document_id: int, text: str, embedding: bytes
    ) -> None:
        session.add(
            ChunkRow(document_id=document_id, chunk_text=text, embedding=embedding)
        )

    def load_chunks(self) -> List[StoredChunk]:
        """Every stored chunk in insertion order."""
        stmt = (
            select(
                ChunkRow.id,
                ChunkRow.document_id,
                DocumentRow.file_path,
                ChunkRow.chunk_text,
                ChunkRow.embedding,
            )
            .join(DocumentRow, DocumentRow.id == ChunkRow.document_id)
            .order_by(ChunkRow.id)
        )
        with self._session_factory() as session:
            return [
                StoredChunk(
                    id=r.id,
                    document_id=r.document_id,
                    document_path=r.file_path,
                    text=r.chunk_text,
                    embedding=r.embedding,
                )
                for r in session.execute(stmt)
            ]

    def count_chunks(self, document_id: Optional[int] = None) -> int:
        stmt = select(func.count()).select_from(ChunkRow)
        if document_id is not None:
            stmt = stmt.where(ChunkRow.document_id == document_id)
        with self._session_factory() as session:
            return session.scalar(stmt) or 0

    def embedding_dimension(self) -> Optional[int]:
        """Dimension of the stored vectors, None while the store has no chunks."""
        with self._session_factory() as session:
            blob = session.scalar(
                select(ChunkRow.embedding).order_by(ChunkRow.id).limit(1)
            )
        return embedding_dimension(blob) if blob is not None else None

import enum
from dataclasses import dataclass
from pathlib import Path


class ChangeStatus(str, enum.Enum):
    NEW = "new"
    UNCHANGED = "unchanged"
    MODIFIED = "modified"


@dataclass(frozen=True)
class DocumentRecord:
    id: int
    path: str  # resolved source path, unique in the store
    content_hash: str


@dataclass
class SourceDocument:
    id: int
    path: Path
    text: str  # full extracted text
    content_hash: str
    status: ChangeStatus = ChangeStatus.NEW


@dataclass
class TextChunk:
    document_id: int
    text: str


@dataclass(frozen=True)
class StoredChunk:
    id: int
    document_id: int
    document_path: str
    text: str
    embedding: bytes  # little-endian float32

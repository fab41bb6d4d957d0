from __future__ import annotations

import re
import unicodedata
from pathlib import Path
from typing import Iterable, List

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from common.errors import ExtractionError, SourceIOError, UnsupportedFormatError
from common.logger import get_logger

log = get_logger(__name__)

TEXT_EXTS = (".txt", ".md")


def normalize_text(s: str) -> str:
    s = unicodedata.normalize("NFKC", s)
    s = s.replace("\u00a0", " ")
    s = re.sub(r"[ \t]+", " ", s)
    s = re.sub(r"[ \t]+\n", "\n", s)
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()


def discover_files(root: Path) -> List[Path]:
    """
    Recursively list every regular file under root, sorted for a stable order.
    Extension filtering happens in extract_text so unsupported files get logged.
    """
    return sorted(p for p in root.rglob("*") if p.is_file())


def extract_text(
    path: Path,
    allowed_exts: Iterable[str] = (".pdf",) + TEXT_EXTS,
    max_pdf_pages: int | None = None,
) -> str:
    """
    Return the normalised plain text of a local file.

    Raises:
        UnsupportedFormatError: extension not in allowed_exts (or no extractor for it)
        ExtractionError: the file could not be decoded or parsed
        SourceIOError: the file could not be read at all
    """
    ext = path.suffix.lower()
    if ext not in {e.lower() for e in allowed_exts}:
        raise UnsupportedFormatError(f"Unsupported file type: {path}")

    if ext == ".pdf":
        raw = _extract_pdf_text(path, max_pdf_pages)
    elif ext in TEXT_EXTS:
        raw = _read_text_file(path)
    else:
        raise UnsupportedFormatError(f"No text extractor for '{ext}': {path}")
    return normalize_text(raw)


def _read_text_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError(f"File is not valid UTF-8: {path}") from e
    except OSError as e:
        raise SourceIOError(f"Failed to read '{path}': {e}") from e


def _extract_pdf_text(path: Path, max_pages: int | None) -> str:
    try:
        reader = PdfReader(str(path))
        pages = reader.pages
        limit = len(pages) if max_pages is None else max_pages
        texts = [page.extract_text() or "" for page in pages[:limit]]
    except OSError as e:
        raise SourceIOError(f"Failed to read '{path}': {e}") from e
    except (PyPdfError, ValueError) as e:
        raise ExtractionError(f"Failed to extract text from PDF '{path}': {e}") from e
    log.debug("Extracted %d pages from %s", len(texts), path)
    return "\n".join(texts)

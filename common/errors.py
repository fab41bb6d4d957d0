from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    CONFIG = "config"
    IO = "io"
    PROVIDER = "provider"
    CORRUPTION = "corruption"
    PROCESSING = "processing"


class KnowledgeEngineError(Exception):
    """
    Base class for every failure the engine reports.
    `kind` tags the failure so the CLI can report it uniformly.
    """

    kind: ErrorKind = ErrorKind.PROCESSING


class ConfigError(KnowledgeEngineError):
    kind = ErrorKind.CONFIG


class SourceIOError(KnowledgeEngineError):
    kind = ErrorKind.IO


class ProviderError(KnowledgeEngineError):
    kind = ErrorKind.PROVIDER


class CorruptionError(KnowledgeEngineError):
    kind = ErrorKind.CORRUPTION


class ProcessingError(KnowledgeEngineError):
    kind = ErrorKind.PROCESSING


class ExtractionError(ProcessingError):
    """Text could not be extracted from a source file. Ingestion skips it."""


class UnsupportedFormatError(ExtractionError):
    pass

"""Typed errors for bytebite.

Storage and precondition errors are fatal for the operation that raised them.
Sync errors are recoverable: the archive is left exactly as it was and the
caller may retry or report.
"""

from pathlib import Path
from typing import Optional


class BytebiteError(Exception):
    """Base class for all bytebite errors."""

    recoverable = False


class StorageError(BytebiteError):
    """A feed or article document could not be read, decoded or written."""

    def __init__(self, kind: str, path: Path, reason: str):
        self.kind = kind
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{kind} store at {self.path}: {reason}")


class StorageReadError(StorageError):
    pass


class StorageFormatError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class PreconditionError(BytebiteError):
    """An operation was called in a state it does not support."""


class EmptyCatalogError(PreconditionError):
    def __init__(self, message: str = "Feed catalog is empty"):
        super().__init__(message)


class EmptyArchiveError(PreconditionError):
    def __init__(self, message: str = "Article archive is empty"):
        super().__init__(message)


class SelectionError(PreconditionError):
    pass


class FeedInputError(PreconditionError, ValueError):
    """A feed-add line was not of the form ``category | name | url``."""


class SyncError(BytebiteError):
    """A sync failed before anything was committed."""

    recoverable = True


class NetworkError(SyncError):
    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Fetching {url} failed: {reason}")


class FeedParseError(SyncError):
    pass


class DateParseError(SyncError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unparseable publication date: {value!r}")

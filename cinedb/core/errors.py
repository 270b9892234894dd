# cinedb/core/errors.py
"""Error kinds surfaced by the movie store."""


class CineDBError(Exception):
    """Base class for every error raised by the data layer."""


class RecordNotFoundError(CineDBError):
    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


class EditConflictError(CineDBError):
    """The row changed (or vanished) since the caller last read it."""

    def __init__(self, message: str = "edit conflict") -> None:
        super().__init__(message)


class StorageError(CineDBError):
    """Opaque backend failure. The driver exception is kept as __cause__."""


class QueryTimeoutError(StorageError):
    pass

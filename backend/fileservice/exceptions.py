"""Domain exceptions raised by the file service core."""
from typing import Iterable, Optional
from uuid import UUID


class FileServiceError(Exception):
    """
    Base exception class for all file service errors.
    """
    pass


class ValidationError(FileServiceError):
    """
    Raised when required input is missing or malformed (no bytes, empty batch).
    """
    pass


class NotFoundError(FileServiceError):
    """
    Raised when a file id does not resolve to an active (non-deleted) record.
    """

    def __init__(self, message: str, file_ids: Optional[Iterable[UUID]] = None):
        super().__init__(message)
        self.file_ids = list(file_ids or [])


class ConflictError(FileServiceError):
    """
    Raised when a write carries a version that no longer matches the stored one.
    """

    def __init__(self, message: str, file_id: Optional[UUID] = None):
        super().__init__(message)
        self.file_id = file_id


class StorageError(FileServiceError):
    """
    Raised when the underlying database is unavailable or a write fails.
    """
    pass

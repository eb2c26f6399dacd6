"""File lifecycle: create, read, edit, replace and soft-delete file records.

All state transitions of a FileRecord live here. The manager never touches
the database directly; it is handed a FileStore and runs each operation as a
single store transaction.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, NamedTuple, Optional, Sequence

from fileservice.exceptions import NotFoundError, ValidationError
from fileservice.models.base import as_utc, utcnow
from fileservice.models.file_record import FileRecord
from fileservice.services.file_store import FileStore

logger = logging.getLogger(__name__)

TAG_SEPARATOR = ","


class FileUpload(NamedTuple):
    """One file to create: display name, MIME type and raw bytes."""
    file_name: Optional[str]
    file_type: Optional[str]
    data: Optional[bytes]


@dataclass
class FileDetails:
    file_id: uuid.UUID
    file_name: Optional[str]
    file_type: Optional[str]
    size: int
    tags: list[str]
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileDetails":
        # size is derived from the payload on every read, never stored
        return cls(
            file_id=record.file_id,
            file_name=record.file_name,
            file_type=record.file_type,
            size=record.size,
            tags=record.tag_list,
            created_at=as_utc(record.created_at),
            updated_at=as_utc(record.updated_at),
            version=record.version,
        )


@dataclass
class FileContent:
    file_id: uuid.UUID
    file_name: Optional[str]
    file_type: Optional[str]
    data: bytes


@dataclass
class BatchDeleteResult:
    """Per-id outcome of a batch delete."""
    deleted: list[uuid.UUID] = field(default_factory=list)
    not_found: list[uuid.UUID] = field(default_factory=list)


def join_tags(tags: Iterable[str]) -> str:
    """Join tags with a comma. Commas inside a tag are not escaped."""
    return TAG_SEPARATOR.join(tags)


class FileLifecycleManager:
    """Enforces the FileRecord lifecycle rules on top of a FileStore."""

    def __init__(self, store: FileStore):
        self.store = store

    async def create(
        self,
        file_name: Optional[str],
        file_type: Optional[str],
        data: Optional[bytes],
    ) -> FileRecord:
        """Store a new file. Name and type are kept as given, even when missing."""
        logger.info("Uploading file: %s", file_name)
        if data is None:
            raise ValidationError("File content is required")

        async with self.store.transaction():
            record = await self.store.insert_one(_new_record(file_name, file_type, data))

        logger.info("File uploaded successfully: %s (%s)", record.file_name, record.file_id)
        return record

    async def create_batch(self, files: Sequence[FileUpload]) -> list[FileRecord]:
        """Store several files in one transaction: all of them or none."""
        logger.info("Uploading multiple files, total count: %d", len(files))
        if not files:
            logger.error("No files provided for upload")
            raise ValidationError("No files provided for upload")

        records = []
        for index, (file_name, file_type, data) in enumerate(files):
            if data is None:
                raise ValidationError(f"File content is required (item {index}: {file_name!r})")
            records.append(_new_record(file_name, file_type, data))

        async with self.store.transaction():
            saved = await self.store.insert_many(records)

        logger.info("Successfully uploaded %d files", len(saved))
        return saved

    async def get_active(self, file_id: uuid.UUID) -> FileRecord:
        """Load a non-deleted record. Deleted and unknown ids look the same."""
        record = await self.store.find_active_by_id(file_id)
        if record is None:
            logger.warning("File not found or deleted: %s", file_id)
            raise NotFoundError(f"File not found with id: {file_id}", file_ids=[file_id])
        return record

    async def get_details(self, file_id: uuid.UUID) -> FileDetails:
        logger.info("Fetching file details for ID: %s", file_id)
        return FileDetails.from_record(await self.get_active(file_id))

    async def download(self, file_id: uuid.UUID) -> FileContent:
        logger.info("Downloading file with ID: %s", file_id)
        record = await self.get_active(file_id)
        return FileContent(record.file_id, record.file_name, record.file_type, record.data)

    async def preview(self, file_id: uuid.UUID) -> FileContent:
        """Raw bytes plus declared type for inline rendering. No conversion is done."""
        logger.info("Previewing file with ID: %s", file_id)
        record = await self.get_active(file_id)
        return FileContent(record.file_id, record.file_name, record.file_type, record.data)

    async def delete(self, file_id: uuid.UUID) -> None:
        """Soft-delete one file. Deleting an already deleted file raises NotFoundError."""
        logger.info("Deleting file with ID: %s", file_id)
        async with self.store.transaction():
            record = await self.get_active(file_id)
            record.deleted = True
            await self.store.save(record)
        logger.info("File deleted successfully with ID: %s", file_id)

    async def delete_batch(self, file_ids: Sequence[uuid.UUID]) -> BatchDeleteResult:
        """Soft-delete every requested file that is currently active.

        Ids that are unknown or already deleted are reported in `not_found`
        instead of failing the batch. NotFoundError is raised only when none
        of the requested ids resolve.
        """
        requested = list(dict.fromkeys(file_ids))
        logger.info("Deleting multiple files, total count: %d", len(requested))

        async with self.store.transaction():
            records = await self.store.find_active_by_ids_in(requested)
            if not records:
                logger.error("No valid files found for the provided IDs")
                raise NotFoundError("No valid files found for the provided IDs", file_ids=requested)
            for record in records:
                record.deleted = True
            await self.store.save_many(records)

        found = {record.file_id for record in records}
        result = BatchDeleteResult(
            deleted=[file_id for file_id in requested if file_id in found],
            not_found=[file_id for file_id in requested if file_id not in found],
        )
        if result.not_found:
            logger.warning("Skipped %d unresolved file id(s) in batch delete", len(result.not_found))
        logger.info("Successfully deleted %d files", len(result.deleted))
        return result

    async def update_metadata(
        self,
        file_id: uuid.UUID,
        file_name: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        expected_version: Optional[int] = None,
    ) -> FileDetails:
        """Edit name and/or tags.

        A blank or missing name leaves the current one. `tags=None` leaves tags
        alone while an empty list clears them; otherwise they are overwritten,
        never merged.
        """
        logger.info("Updating metadata for file ID: %s", file_id)
        async with self.store.transaction():
            record = await self.get_active(file_id)
            if file_name is not None and file_name.strip():
                record.file_name = file_name
            if tags is not None:
                record.tags = join_tags(tags)
            await self.store.save(record, expected_version)

        logger.info("Metadata updated successfully for file ID: %s", file_id)
        return FileDetails.from_record(record)

    async def replace(
        self,
        file_id: uuid.UUID,
        file_name: Optional[str],
        file_type: Optional[str],
        data: Optional[bytes],
        expected_version: Optional[int] = None,
    ) -> FileRecord:
        """Overwrite name, type and content of an existing file wholesale."""
        logger.info("Replacing file with ID: %s", file_id)
        if data is None:
            raise ValidationError("File content is required")

        async with self.store.transaction():
            record = await self.get_active(file_id)
            record.file_name = file_name
            record.file_type = file_type
            record.data = data
            record.updated_at = utcnow()
            await self.store.save(record, expected_version)

        logger.info("File replaced successfully with ID: %s", file_id)
        return record


def _new_record(file_name: Optional[str], file_type: Optional[str], data: bytes) -> FileRecord:
    now = utcnow()
    return FileRecord(
        file_id=uuid.uuid4(),
        file_name=file_name,
        file_type=file_type,
        data=data,
        deleted=False,
        version=0,
        created_at=now,
        updated_at=now,
    )

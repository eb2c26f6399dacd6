"""Persistence for file records.

FileStore is the only component that talks to the database. It wraps a
single AsyncSession (one per request) and exposes the handful of queries the
lifecycle manager and the listing service need. Every read that returns
records to callers goes through the same "not deleted" predicate so that
soft-deleted rows can never leak out of one code path while staying hidden
in another.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from fileservice.exceptions import ConflictError, StorageError
from fileservice.models.base import utcnow
from fileservice.models.file_record import FileRecord

logger = logging.getLogger(__name__)


def active_filter():
    """WHERE clause shared by every read path: the row is not soft-deleted."""
    return FileRecord.deleted.is_(False)


class FileStore:
    """Keyed storage for FileRecord rows on top of an injected session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["FileStore"]:
        """Unit of work: commit when the block succeeds, roll back otherwise.

        Reads performed inside the block and the writes that follow them are
        committed together, so a failure anywhere leaves the previously
        committed state untouched.
        """
        try:
            yield self
            await self.session.commit()
        except StaleDataError as e:
            await self.session.rollback()
            raise ConflictError("File was modified concurrently, reload and retry") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error, transaction rolled back: %s", e)
            raise StorageError(f"Storage operation failed: {e}") from e
        except Exception:
            await self.session.rollback()
            raise

    # ── Writes ────────────────────────────────────────────────────

    async def insert_one(self, record: FileRecord) -> FileRecord:
        self.session.add(record)
        await self._flush()
        return record

    async def insert_many(self, records: Sequence[FileRecord]) -> list[FileRecord]:
        """Stage all rows and flush them together; visibility is decided by the commit."""
        self.session.add_all(records)
        await self._flush()
        return list(records)

    async def save(self, record: FileRecord, expected_version: Optional[int] = None) -> FileRecord:
        """Update a row in place, bumping its version.

        `expected_version` is the version the caller based its edit on. When it
        differs from the version loaded into the session, or when another
        writer has bumped the stored row since it was loaded, ConflictError is
        raised instead of overwriting.
        """
        # A failed flush expires the instance, so nothing may be read from it afterwards
        file_id = record.file_id
        current = record.version
        if expected_version is not None and expected_version != current:
            raise ConflictError(
                f"Version mismatch for file {file_id}: "
                f"expected {expected_version}, stored {current}",
                file_id=file_id,
            )
        record.version = current + 1
        record.updated_at = utcnow()
        try:
            await self._flush()
        except StaleDataError as e:
            raise ConflictError(
                f"File {file_id} was modified concurrently (version {current} is stale)",
                file_id=file_id,
            ) from e
        return record

    async def save_many(self, records: Sequence[FileRecord]) -> list[FileRecord]:
        file_ids = [record.file_id for record in records]
        for record in records:
            record.version = record.version + 1
            record.updated_at = utcnow()
        try:
            await self._flush()
        except StaleDataError as e:
            raise ConflictError(
                f"One or more of {len(file_ids)} files were modified concurrently: "
                + ", ".join(str(file_id) for file_id in file_ids)
            ) from e
        return list(records)

    # ── Reads (active rows only) ──────────────────────────────────

    async def find_active_by_id(self, file_id: uuid.UUID) -> Optional[FileRecord]:
        query = select(FileRecord).where(FileRecord.file_id == file_id, active_filter())
        query = query.execution_options(populate_existing=True)
        result = await self._execute(query)
        return result.scalar_one_or_none()

    async def find_active_by_ids_in(self, file_ids: Sequence[uuid.UUID]) -> list[FileRecord]:
        if not file_ids:
            return []
        query = select(FileRecord).where(FileRecord.file_id.in_(file_ids), active_filter())
        query = query.execution_options(populate_existing=True)
        result = await self._execute(query)
        return list(result.scalars().all())

    async def find_all_active_paged(self, offset: int, limit: int) -> tuple[list[FileRecord], int]:
        """Return one page of active rows and the total active count.

        No ORDER BY is applied: rows come back in the database's default
        iteration order, which is not guaranteed stable under concurrent inserts.
        """
        count_query = select(func.count()).select_from(FileRecord).where(active_filter())
        total = (await self._execute(count_query)).scalar_one()

        page_query = (
            select(FileRecord)
            .where(active_filter())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self._execute(page_query)
        return list(result.scalars().all()), total

    # ── Helpers ───────────────────────────────────────────────────

    async def _execute(self, query):
        try:
            return await self.session.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database read failed: %s", e)
            raise StorageError(f"Storage read failed: {e}") from e

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except StaleDataError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database write failed: %s", e)
            raise StorageError(f"Storage write failed: {e}") from e

"""Paginated listing of active files."""
import logging
from dataclasses import dataclass

from fileservice.exceptions import ValidationError
from fileservice.services.file_lifecycle import FileDetails
from fileservice.services.file_store import FileStore

logger = logging.getLogger(__name__)


@dataclass
class FilePage:
    items: list[FileDetails]
    total: int
    page: int
    size: int


class FileListingService:
    """Turns page/size into a bounded slice of non-deleted files.

    `page` is zero-based. No upper bound is put on `size` here; the HTTP layer
    clamps it.
    """

    def __init__(self, store: FileStore):
        self.store = store

    async def list(self, page: int, size: int) -> FilePage:
        logger.info("Listing files, page: %d, size: %d", page, size)
        if page < 0:
            raise ValidationError("Page index must not be negative")
        if size < 1:
            raise ValidationError("Page size must be at least 1")

        records, total = await self.store.find_all_active_paged(offset=page * size, limit=size)

        logger.info("Retrieved %d of %d files", len(records), total)
        return FilePage(
            items=[FileDetails.from_record(r) for r in records],
            total=total,
            page=page,
            size=size,
        )

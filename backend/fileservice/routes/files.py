"""Files API routes."""
from typing import Optional
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Form, HTTPException, Query, UploadFile, File as FastAPIFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from fileservice.config import settings
from fileservice.database import get_db
from fileservice.models.file_record import FileRecord
from fileservice.schemas.common import BatchDeleteResponse, DeleteResponse
from fileservice.schemas.file import (
    FileDetailsResponse,
    FileMetadataUpdate,
    FilePageResponse,
    FileUploadResponse,
)
from fileservice.services.file_lifecycle import FileDetails, FileLifecycleManager, FileUpload
from fileservice.services.file_listing import FileListingService
from fileservice.services.file_store import FileStore

router = APIRouter(prefix="/api/files", tags=["files"])


def get_lifecycle(db: AsyncSession = Depends(get_db)) -> FileLifecycleManager:
    return FileLifecycleManager(FileStore(db))


def get_listing(db: AsyncSession = Depends(get_db)) -> FileListingService:
    return FileListingService(FileStore(db))


@router.post("/upload", response_model=FileUploadResponse, status_code=201)
async def upload_file(
    file: UploadFile = FastAPIFile(...),
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Upload a single file."""
    contents = await _read_upload(file)
    record = await lifecycle.create(file.filename, file.content_type, contents)
    return _to_upload_response(record)


@router.post("/uploads", response_model=list[FileUploadResponse], status_code=201)
async def upload_files(
    files: list[UploadFile] = FastAPIFile(...),
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Upload several files in one all-or-nothing batch."""
    uploads = [
        FileUpload(f.filename, f.content_type, await _read_upload(f))
        for f in files
    ]
    records = await lifecycle.create_batch(uploads)
    return [_to_upload_response(r) for r in records]


@router.get("", response_model=FilePageResponse)
async def list_files(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Page size"),
    listing: FileListingService = Depends(get_listing),
):
    """List non-deleted files, one page at a time."""
    result = await listing.list(page, min(size, settings.MAX_PAGE_SIZE))
    return {
        "items": [_to_details_response(d) for d in result.items],
        "total": result.total,
        "page": result.page,
        "size": result.size,
    }


@router.post("/delete", response_model=BatchDeleteResponse)
async def delete_files(
    file_ids: list[UUID] = Body(...),
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Soft-delete several files. Unknown or already deleted ids come back in notFound."""
    result = await lifecycle.delete_batch(file_ids)
    return {"deleted": result.deleted, "not_found": result.not_found}


@router.get("/download/{file_id}")
async def download_file(
    file_id: UUID,
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Download a file as an attachment."""
    content = await lifecycle.download(file_id)
    return Response(
        content=content.data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": _content_disposition("attachment", content.file_name)},
    )


@router.get("/preview/{file_id}")
async def preview_file(
    file_id: UUID,
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Return the raw bytes with their declared content type for inline display."""
    content = await lifecycle.preview(file_id)
    return Response(
        content=content.data,
        media_type=content.file_type or "application/octet-stream",
        headers={"Content-Disposition": _content_disposition("inline", content.file_name)},
    )


@router.get("/{file_id}", response_model=FileDetailsResponse)
async def get_file_details(
    file_id: UUID,
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Get file details by ID."""
    details = await lifecycle.get_details(file_id)
    return _to_details_response(details)


@router.put("/{file_id}", response_model=FileDetailsResponse)
async def update_metadata(
    file_id: UUID,
    body: FileMetadataUpdate,
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Update name and/or tags. Send the last seen version to detect concurrent edits."""
    details = await lifecycle.update_metadata(
        file_id,
        file_name=body.file_name,
        tags=body.tags,
        expected_version=body.version,
    )
    return _to_details_response(details)


@router.put("/{file_id}/replace", response_model=FileUploadResponse)
async def replace_file(
    file_id: UUID,
    file: UploadFile = FastAPIFile(...),
    version: Optional[int] = Form(None),
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Replace the name, type and content of an existing file."""
    contents = await _read_upload(file)
    record = await lifecycle.replace(
        file_id, file.filename, file.content_type, contents, expected_version=version
    )
    return _to_upload_response(record)


@router.delete("/{file_id}", response_model=DeleteResponse)
async def delete_file(
    file_id: UUID,
    lifecycle: FileLifecycleManager = Depends(get_lifecycle),
):
    """Soft-delete a file."""
    await lifecycle.delete(file_id)
    return {"deleted": True, "id": str(file_id)}


async def _read_upload(file: UploadFile) -> bytes:
    contents = await file.read()
    limit = settings.MAX_UPLOAD_SIZE_BYTES
    if limit and len(contents) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"File '{file.filename}' exceeds the {limit} byte upload limit",
        )
    return contents


def _content_disposition(disposition: str, file_name: Optional[str]) -> str:
    name = file_name or "file"
    if name.isascii():
        escaped = name.replace("\\", "\\\\").replace('"', '\\"')
        return f'{disposition}; filename="{escaped}"'
    return f"{disposition}; filename*=UTF-8''{quote(name)}"


def _to_upload_response(record: FileRecord) -> dict:
    return {
        "id": record.file_id,
        "name": record.file_name,
        "type": record.file_type,
    }


def _to_details_response(details: FileDetails) -> dict:
    return {
        "id": details.file_id,
        "name": details.file_name,
        "type": details.file_type,
        "size": details.size,
        "tags": details.tags,
        "created_at": details.created_at,
        "updated_at": details.updated_at,
        "version": details.version,
    }

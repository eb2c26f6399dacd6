"""File request/response schemas."""
import uuid
from datetime import datetime
from typing import Optional
from fileservice.schemas.base import CamelModel, CamelORMModel


class FileMetadataUpdate(CamelModel):
    file_name: Optional[str] = None
    tags: Optional[list[str]] = None
    # Version the client read; omitted means "whatever is stored now"
    version: Optional[int] = None


class FileUploadResponse(CamelORMModel):
    id: uuid.UUID
    name: Optional[str] = None
    type: Optional[str] = None


class FileDetailsResponse(CamelORMModel):
    id: uuid.UUID
    name: Optional[str] = None
    type: Optional[str] = None
    size: int
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime
    version: int


class FilePageResponse(CamelORMModel):
    items: list[FileDetailsResponse]
    total: int
    page: int
    size: int

"""Shared Pydantic schemas."""
import uuid
from pydantic import BaseModel
from fileservice.schemas.base import CamelORMModel


class DeleteResponse(BaseModel):
    deleted: bool = True
    id: str = ""


class BatchDeleteResponse(CamelORMModel):
    deleted: list[uuid.UUID] = []
    not_found: list[uuid.UUID] = []

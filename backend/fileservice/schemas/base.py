"""Pydantic bases for the /api/files payloads.

Services speak snake_case (file_name, created_at); the JSON on the wire is
camelCase (fileName, createdAt, updatedAt).
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request bodies such as a metadata edit. Either casing is accepted."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class CamelORMModel(BaseModel):
    """Responses built from FileRecord rows or lifecycle results (FileDetails, FilePage)."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }

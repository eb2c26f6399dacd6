"""Import all models so SQLAlchemy metadata knows about them."""
from fileservice.models.base import Base
from fileservice.models.file_record import FileRecord

__all__ = ["Base", "FileRecord"]

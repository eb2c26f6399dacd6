"""FileRecord model - file metadata and bytes in a single row."""
import uuid
from sqlalchemy import String, Text, Boolean, Integer, LargeBinary, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from fileservice.models.base import Base, TimestampMixin


class FileRecord(Base, TimestampMixin):
    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), nullable=False, unique=True, index=True, default=uuid.uuid4
    )
    file_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    file_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Bumped by FileStore.save, checked by the mapper on every UPDATE
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": False,
    }

    @property
    def size(self) -> int:
        return len(self.data) if self.data is not None else 0

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return self.tags.split(",")

    def __repr__(self) -> str:
        return f"<FileRecord file_id={self.file_id} name={self.file_name!r} v{self.version}>"

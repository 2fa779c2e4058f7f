from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.common import TimestampMixin, UUIDPrimaryKeyMixin

FOLDER = "folder"
FILE = "file"
IMAGE = "image"
FILE_KINDS = (FOLDER, FILE, IMAGE)

# Descending; the worker generates widths in this order.
THUMBNAIL_WIDTHS = (500, 250, 100)


class FileNode(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "files"

    # No foreign key: nodes outlive the owning user record.
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    # NULL is the root.
    parent_id: Mapped[str | None] = mapped_column(ForeignKey("files.id"), nullable=True, index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    blob_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)

    thumbnails = relationship("Thumbnail", back_populates="file", cascade="all, delete-orphan", lazy="selectin")

    @property
    def is_folder(self) -> bool:
        return self.kind == FOLDER

    @property
    def derived_blob_refs(self) -> dict[int, str]:
        return {thumb.width: thumb.blob_ref for thumb in self.thumbnails}


class Thumbnail(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "thumbnails"
    __table_args__ = (UniqueConstraint("file_id", "width", name="uq_thumbnails_file_width"),)

    file_id: Mapped[str] = mapped_column(ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True)
    width: Mapped[int] = mapped_column(Integer, nullable=False)
    blob_ref: Mapped[str] = mapped_column(String(64), nullable=False)

    file = relationship("FileNode", back_populates="thumbnails")

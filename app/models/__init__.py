from app.models.file import FILE_KINDS, THUMBNAIL_WIDTHS, FileNode, Thumbnail
from app.models.user import User

__all__ = ["User", "FileNode", "Thumbnail", "FILE_KINDS", "THUMBNAIL_WIDTHS"]

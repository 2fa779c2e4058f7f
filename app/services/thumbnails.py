import io
import logging
from dataclasses import dataclass, field

from PIL import Image
from sqlalchemy.orm import Session

from app.models.file import IMAGE, THUMBNAIL_WIDTHS
from app.services import catalog
from app.services.storage import BlobStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ThumbnailReport:
    file_id: str
    generated: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)
    skipped: bool = False

    @property
    def complete(self) -> bool:
        return not self.failed


def resize_image(source: bytes, width: int) -> bytes:
    with Image.open(io.BytesIO(source)) as img:
        fmt = img.format or "PNG"
        if img.mode not in ("RGB", "RGBA", "L"):
            img = img.convert("RGBA" if fmt == "PNG" else "RGB")
        height = max(1, round(img.height * width / img.width))
        resized = img.resize((width, height), Image.Resampling.LANCZOS)
        buffer = io.BytesIO()
        resized.save(buffer, format=fmt)
        return buffer.getvalue()


def generate_thumbnails(db: Session, blobs: BlobStore, owner_id: str, file_id: str) -> ThumbnailReport:
    """Produce every configured width for an image node.

    Raises ``NotFoundError`` when the node is gone or no longer owned by
    ``owner_id``. A failing width is recorded in the report and does not stop
    the remaining widths.
    """
    node = catalog.get_node(db, file_id, owner_id=owner_id)
    report = ThumbnailReport(file_id=node.id)
    if node.kind != IMAGE:
        logger.warning("thumbnail_job_not_image", extra={"file_id": node.id, "kind": node.kind})
        report.skipped = True
        return report

    source_ref = node.blob_ref
    source: bytes | None = None
    for width in THUMBNAIL_WIDTHS:
        try:
            if source is None:
                source = blobs.read_bytes(source_ref)
            derived_ref = blobs.put_derived(source_ref, width, resize_image(source, width))
            catalog.record_thumbnail(db, report.file_id, width, derived_ref)
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            logger.exception("thumbnail_width_failed", extra={"file_id": report.file_id, "width": width})
            report.failed[width] = str(exc) or exc.__class__.__name__
            continue
        report.generated.append(width)
    return report

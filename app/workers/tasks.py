import logging

from celery.exceptions import Reject
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.exceptions import NotFoundError, StorageUnavailable
from app.db.session import SessionLocal
from app.services.storage import get_blob_store
from app.services.thumbnails import ThumbnailReport, generate_thumbnails
from app.services.users import get_user
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)
settings = get_settings()


class ThumbnailGenerationError(Exception):
    pass


def run_thumbnail_job(owner_id: str, file_id: str) -> ThumbnailReport:
    db = SessionLocal()
    try:
        return generate_thumbnails(db, get_blob_store(), owner_id, file_id)
    finally:
        db.close()


@celery_app.task(bind=True, name="files.generate_thumbnails", max_retries=settings.thumbnail_max_retries)
def generate_thumbnails_job(self, owner_id: str, file_id: str) -> dict:
    if not owner_id or not file_id:
        logger.error("thumbnail_job_invalid", extra={"owner_id": owner_id, "file_id": file_id})
        raise Reject("Missing owner_id or file_id", requeue=False)
    countdown = settings.thumbnail_retry_backoff_seconds * (2 ** self.request.retries)
    try:
        report = run_thumbnail_job(owner_id, file_id)
    except NotFoundError as exc:
        # Deleted or re-owned since the upload; retrying cannot help.
        logger.warning("thumbnail_job_dropped", extra={"owner_id": owner_id, "file_id": file_id})
        raise Reject("File not found", requeue=False) from exc
    except (SQLAlchemyError, StorageUnavailable) as exc:
        logger.warning("thumbnail_job_store_error", extra={"file_id": file_id, "attempt": self.request.retries + 1})
        raise self.retry(exc=exc, countdown=countdown)
    if not report.complete:
        logger.warning(
            "thumbnail_job_retry",
            extra={"file_id": file_id, "failed_widths": sorted(report.failed), "attempt": self.request.retries + 1},
        )
        raise self.retry(
            exc=ThumbnailGenerationError(f"Widths failed: {sorted(report.failed)}"),
            countdown=countdown,
        )
    return {"file_id": report.file_id, "generated": report.generated, "skipped": report.skipped}


@celery_app.task(name="users.send_welcome_email")
def send_welcome_email_job(user_id: str) -> None:
    db = SessionLocal()
    try:
        user = get_user(db, user_id)
        if not user:
            logger.warning("welcome_email_user_missing", extra={"user_id": user_id})
            return
        logger.info("Welcome %s!", user.email)
    finally:
        db.close()

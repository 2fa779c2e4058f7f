import logging

from celery import Task

from app.core.config import get_settings
from app.workers.tasks import generate_thumbnails_job, send_welcome_email_job

logger = logging.getLogger(__name__)


def _dispatch(task: Task, *args: str) -> None:
    """Best-effort send; a failure here never fails the caller's request."""
    settings = get_settings()
    try:
        if settings.celery_task_always_eager:
            task(*args)
        else:
            task.apply_async(args=args, retry=False)
    except Exception:  # noqa: BLE001
        logger.exception("job_enqueue_failed", extra={"task": task.name, "job_args": list(args)})


def enqueue_thumbnail_job(owner_id: str, file_id: str) -> None:
    _dispatch(generate_thumbnails_job, owner_id, file_id)


def enqueue_welcome_email(user_id: str) -> None:
    _dispatch(send_welcome_email_job, user_id)

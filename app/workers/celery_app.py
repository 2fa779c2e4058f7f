from celery import Celery
from celery.signals import worker_init

from app.core.config import get_settings
from app.core.logging import configure_logging

settings = get_settings()

celery_app = Celery(
    "files_manager",
    broker=settings.get_celery_broker_url(),
    backend=settings.get_celery_result_backend(),
    include=["app.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # At-least-once: a job is acknowledged only after it finishes.
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.worker_concurrency,
    task_ignore_result=True,
)


@worker_init.connect
def wait_for_stores(**_kwargs) -> None:
    from app.db.session import wait_for_database

    configure_logging()
    wait_for_database(settings.store_connect_attempts, settings.store_connect_interval_seconds)

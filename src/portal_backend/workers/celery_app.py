"""Celery application running the periodic maintenance tasks."""

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, worker_ready, worker_shutdown
import structlog

from portal_backend.core.config import settings
from portal_backend.core.custom_types import utcnow
from portal_backend.core.logging import configure_logging

logger = structlog.get_logger(__name__)

celery_app = Celery(
    "portal_backend",
    broker=settings.celery_broker_url_computed,
    backend=settings.celery_result_backend_computed,
    include=[
        "portal_backend.workers.maintenance_tasks",
    ]
)

celery_app.conf.update(
    task_routes={
        "maintenance.*": {"queue": "maintenance"},
    },

    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    task_soft_time_limit=300,
    task_time_limit=600,
    result_expires=7200,

    task_acks_late=True,
    task_reject_on_worker_lost=True,

    timezone="UTC",
    enable_utc=True,

    beat_schedule={
        "close-expired-jobs": {
            "task": "maintenance.close_expired_jobs",
            "schedule": 3600.0,  # Hourly
        },
        "purge-expired-notifications": {
            "task": "maintenance.purge_expired_notifications",
            "schedule": 86400.0,  # Daily
        },
        "purge-disabled-device-tokens": {
            "task": "maintenance.purge_disabled_device_tokens",
            "schedule": 86400.0,  # Daily
        },
    },
)


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, **kwds):
    logger.info(
        "Task started",
        task_id=task_id,
        task_name=task.name if task else sender,
        timestamp=utcnow().isoformat(),
    )


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, retval=None, state=None, **kwds):
    """Log task completion with its result summary."""
    context = {
        "task_id": task_id,
        "task_name": task.name if task else sender,
        "state": state,
        "success": state == "SUCCESS",
    }
    if state == "SUCCESS" and isinstance(retval, dict):
        context.update(retval)
    logger.info("Task completed", **context)


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, **kwds):
    logger.error(
        "Task failed",
        task_id=task_id,
        task_name=sender.name if sender else "unknown",
        exception=str(exception),
        exception_type=type(exception).__name__,
    )


@worker_ready.connect
def worker_ready_handler(sender=None, **kwds):
    configure_logging(settings)
    logger.info(
        "Celery worker ready",
        worker_hostname=sender.hostname if sender else "unknown",
        celery_version=celery_app.version,
    )


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwds):
    logger.info("Celery worker shutting down", worker_hostname=sender.hostname if sender else "unknown")

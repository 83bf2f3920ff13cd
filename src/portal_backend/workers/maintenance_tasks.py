"""Periodic housekeeping: expired jobs, old notifications and dead device tokens."""

from typing import Any, Dict, Optional

from celery import Task
import structlog

from portal_backend.core.config import settings
from portal_backend.core.database import DatabaseManager
from portal_backend.core.logging import performance_logger
from portal_backend.realtime.hub import RealtimeHub
from portal_backend.services.job_service import JobService
from portal_backend.services.notification_service import NotificationService
from portal_backend.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)

_database: Optional[DatabaseManager] = None


def get_database() -> DatabaseManager:
    """Worker-wide database manager, initialised on first use."""
    global _database
    if _database is None:
        _database = DatabaseManager(settings.database_url, echo=settings.database_echo)
        _database.initialize()
    return _database


class MaintenanceTask(Task):
    """Base class for maintenance tasks; failures are retried a few times."""

    autoretry_for = (Exception,)
    retry_kwargs = {"max_retries": 3, "countdown": 60}
    retry_backoff = True

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        logger.warning(
            "Maintenance task retrying",
            task_id=task_id,
            task_name=self.name,
            exception=str(exc),
            retry_count=self.request.retries,
        )


def close_expired_jobs_job(db: DatabaseManager) -> Dict[str, Any]:
    with performance_logger.log_operation_time("close_expired_jobs"):
        with db.get_session() as session:
            closed = JobService(settings).close_expired_jobs(session)
    return {"closed_jobs": closed}


def purge_expired_notifications_job(db: DatabaseManager) -> Dict[str, Any]:
    with performance_logger.log_operation_time("purge_expired_notifications"):
        with db.get_session() as session:
            deleted = NotificationService(settings, RealtimeHub()).purge_expired(session)
    return {"deleted_notifications": deleted}


def purge_disabled_device_tokens_job(db: DatabaseManager) -> Dict[str, Any]:
    with performance_logger.log_operation_time("purge_disabled_device_tokens"):
        with db.get_session() as session:
            deleted = NotificationService(settings, RealtimeHub()).purge_disabled_tokens(session)
    return {"deleted_tokens": deleted}


@celery_app.task(bind=True, base=MaintenanceTask, name="maintenance.close_expired_jobs")
def close_expired_jobs(self) -> Dict[str, Any]:
    """Close every Open job whose application deadline has passed."""
    return close_expired_jobs_job(get_database())


@celery_app.task(bind=True, base=MaintenanceTask, name="maintenance.purge_expired_notifications")
def purge_expired_notifications(self) -> Dict[str, Any]:
    return purge_expired_notifications_job(get_database())


@celery_app.task(bind=True, base=MaintenanceTask, name="maintenance.purge_disabled_device_tokens")
def purge_disabled_device_tokens(self) -> Dict[str, Any]:
    return purge_disabled_device_tokens_job(get_database())

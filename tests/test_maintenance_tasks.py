"""Tests for the periodic maintenance jobs run by the Celery worker."""

from datetime import timedelta

import pytest

from portal_backend.auth.models import User
from portal_backend.core.custom_types import utcnow
from portal_backend.core.database import DatabaseManager
from portal_backend.core.enums import JobStatus
from portal_backend.models.company import Company
from portal_backend.models.device_token import DeviceToken
from portal_backend.models.job import Job
from portal_backend.models.notification import Notification
from portal_backend.workers.celery_app import celery_app
from portal_backend.workers.maintenance_tasks import (
    close_expired_jobs_job,
    purge_disabled_device_tokens_job,
    purge_expired_notifications_job,
)


@pytest.fixture
def database():
    manager = DatabaseManager("sqlite:///:memory:")
    manager.initialize()
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def owner(database):
    with database.get_session() as db:
        user = User(name="Owner", email="owner@example.com", hashed_password="x", role="employer")
        db.add(user)
        db.flush()
        company = Company(owner_id=user.id, name="Acme")
        db.add(company)
        db.flush()
        return user.id, company.id


def test_tasks_registered_on_maintenance_queue():
    for name in (
        "maintenance.close_expired_jobs",
        "maintenance.purge_expired_notifications",
        "maintenance.purge_disabled_device_tokens",
    ):
        assert name in celery_app.tasks
    assert set(celery_app.conf.beat_schedule) == {
        "close-expired-jobs",
        "purge-expired-notifications",
        "purge-disabled-device-tokens",
    }


def test_close_expired_jobs(database, owner):
    user_id, company_id = owner
    now = utcnow()
    with database.get_session() as db:
        for title, deadline, status in (
            ("expired", now - timedelta(hours=1), JobStatus.OPEN),
            ("current", now + timedelta(days=1), JobStatus.OPEN),
            ("draft", now - timedelta(hours=1), JobStatus.DRAFT),
        ):
            db.add(Job(
                employer_id=user_id,
                company_id=company_id,
                title=title,
                description="d",
                location="l",
                status=status.value,
                application_deadline=deadline,
            ))

    assert close_expired_jobs_job(database) == {"closed_jobs": 1}

    with database.get_session() as db:
        statuses = {job.title: job.status for job in db.query(Job)}
    assert statuses == {"expired": "Closed", "current": "Open", "draft": "Draft"}


def test_purge_expired_notifications(database, owner):
    user_id, _ = owner
    now = utcnow()
    with database.get_session() as db:
        db.add(Notification(recipient_id=user_id, title="old", message="m", expires_at=now - timedelta(days=1)))
        db.add(Notification(recipient_id=user_id, title="new", message="m", expires_at=now + timedelta(days=1)))
        db.add(Notification(recipient_id=user_id, title="forever", message="m", expires_at=None))

    assert purge_expired_notifications_job(database) == {"deleted_notifications": 1}

    with database.get_session() as db:
        assert sorted(n.title for n in db.query(Notification)) == ["forever", "new"]


def test_purge_disabled_device_tokens(database, owner):
    user_id, _ = owner
    long_ago = utcnow() - timedelta(days=90)
    with database.get_session() as db:
        db.add(DeviceToken(user_id=user_id, role="employer", fcm_token="stale", enabled=False, updated_at=long_ago))
        db.add(DeviceToken(user_id=user_id, role="employer", fcm_token="recent", enabled=False))
        db.add(DeviceToken(user_id=user_id, role="employer", fcm_token="live", enabled=True, updated_at=long_ago))

    assert purge_disabled_device_tokens_job(database) == {"deleted_tokens": 1}

    with database.get_session() as db:
        assert sorted(t.fcm_token for t in db.query(DeviceToken)) == ["live", "recent"]

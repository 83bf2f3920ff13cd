"""Pytest configuration for job portal backend tests."""

import os

# Plaintext password hashing; must be set before the app is imported
os.environ["TESTING"] = "1"

from datetime import timedelta
from typing import Callable, Dict, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from portal_backend.auth.models import User
from portal_backend.auth.utils import create_access_token, get_password_hash
from portal_backend.core.config import Settings
from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import JobStatus, UserRole, UserStatus
from portal_backend.main import create_app
from portal_backend.models.company import Company
from portal_backend.models.job import Job
from portal_backend.notifications.mailer import EmailSender
from portal_backend.notifications.push import PushPayload, PushProvider, TokenResult

# Configure Hypothesis before importing test modules
from tests.property_based.config import PropertyTestConfig
PropertyTestConfig.configure_hypothesis()


class RecordingPushProvider(PushProvider):
    """Push provider that records every send; tokens in ``invalid_tokens`` fail as UNREGISTERED."""

    enabled = True

    def __init__(self):
        self.sent: List[tuple] = []
        self.invalid_tokens = set()

    async def send(self, tokens: Sequence[str], payload: PushPayload) -> List[TokenResult]:
        self.sent.append((list(tokens), payload))
        results = []
        for token in tokens:
            if token in self.invalid_tokens:
                results.append(TokenResult(token=token, success=False, error_code="UNREGISTERED", error_message="gone"))
            else:
                results.append(TokenResult(token=token, success=True))
        return results


class RecordingEmailSender(EmailSender):
    """Email sender that keeps messages in memory."""

    def __init__(self, settings: Settings, fail: bool = False):
        super().__init__(settings)
        self.sent: List[Dict[str, str]] = []
        self.fail = fail

    async def send(self, to_address: str, subject: str, body: str, html_body: Optional[str] = None) -> None:
        if self.fail:
            from portal_backend.core.error_handling import ExternalServiceError
            raise ExternalServiceError("SMTP unavailable", service_name="smtp")
        self.sent.append({"to": to_address, "subject": subject, "body": body})


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        custom_database_url="sqlite:///:memory:",
        auto_create_tables=True,
        environment="test",
        log_level="WARNING",
        secret_key="test-secret",
        refresh_secret_key="test-refresh-secret",
        client_url="http://portal.test",
    )


@pytest.fixture
def push_provider() -> RecordingPushProvider:
    return RecordingPushProvider()


@pytest.fixture
def email_sender(test_settings) -> RecordingEmailSender:
    return RecordingEmailSender(test_settings)


@pytest.fixture
def app(test_settings, push_provider, email_sender):
    return create_app(test_settings, push_provider=push_provider, email_sender=email_sender)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def services(app, client):
    """Service registry of the running app (started by ``client``)."""
    return app.state.services


@pytest.fixture
def db_session(services):
    """A session on the app's in-memory database for seeding and assertions."""
    with services.db.get_session() as session:
        yield session


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    counter = {"n": 0}

    def factory(
        role: UserRole = UserRole.CANDIDATE,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: str = "secret123",
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.value.title()} {counter['n']}",
            email=email or f"{role.value}{counter['n']}@example.com",
            hashed_password=get_password_hash(password),
            role=role.value,
            status=status.value,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return factory


@pytest.fixture
def auth_headers(test_settings) -> Callable[[User], Dict[str, str]]:
    def headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user, test_settings)}"}

    return headers


@pytest.fixture
def make_company(db_session) -> Callable[..., Company]:
    def factory(owner: User, name: Optional[str] = None) -> Company:
        company = Company(owner_id=owner.id, name=name or f"{owner.name} Inc", location="Remote")
        db_session.add(company)
        db_session.commit()
        db_session.refresh(company)
        return company

    return factory


@pytest.fixture
def make_job(db_session) -> Callable[..., Job]:
    def factory(
        company: Company,
        title: str = "Backend Engineer",
        description: str = "Build APIs",
        status: JobStatus = JobStatus.OPEN,
        deadline_days: float = 30,
        min_salary: Optional[int] = None,
        max_salary: Optional[int] = None,
        **fields,
    ) -> Job:
        job = Job(
            employer_id=company.owner_id,
            company_id=company.id,
            title=title,
            description=description,
            location=fields.pop("location", "Remote"),
            skills_required=fields.pop("skills_required", []),
            status=status.value,
            application_deadline=utcnow() + timedelta(days=deadline_days),
            min_salary=min_salary,
            max_salary=max_salary,
            **fields,
        )
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return factory


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "property_test: mark test as a property-based test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


def pytest_collection_modifyitems(config, items):
    """Mark tests in property_based as property tests."""
    for item in items:
        if "property_based" in str(item.fspath):
            item.add_marker(pytest.mark.property_test)

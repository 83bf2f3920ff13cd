"""Tests for job management and the application lifecycle."""

from datetime import timedelta

import pytest

from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import JobStatus, NotificationType, UserRole
from portal_backend.models.application import Application
from portal_backend.models.notification import Notification
from portal_backend.services.job_service import DEADLINE_LOCKED_MESSAGE


def _future(days: float) -> str:
    return (utcnow() + timedelta(days=days)).isoformat()


@pytest.fixture
def employer(make_user):
    return make_user(UserRole.EMPLOYER, name="Erin")


@pytest.fixture
def company(employer, make_company):
    return make_company(employer, name="Acme")


@pytest.fixture
def candidate(make_user):
    return make_user(UserRole.CANDIDATE, name="Cody")


@pytest.fixture
def job(company, make_job):
    return make_job(company, title="Backend Engineer")


def _apply(client, auth_headers, candidate, job):
    return client.post("/api/applications", json={"jobId": str(job.id)}, headers=auth_headers(candidate))


class TestJobManagement:
    """Employers post and edit their own jobs."""

    def test_create_job(self, client, employer, company, auth_headers):
        response = client.post(
            "/api/jobs",
            json={
                "title": "Data Engineer",
                "description": "Pipelines",
                "location": "Berlin",
                "salaryRange": "40000 - 60000",
                "skillsRequired": ["python", "sql"],
                "applicationDeadline": _future(10),
            },
            headers=auth_headers(employer),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["companyId"] == str(company.id)
        assert data["minSalary"] == 40000
        assert data["maxSalary"] == 60000
        assert data["canApply"] is True
        assert data["applicationsCount"] == 0

    def test_create_job_requires_company(self, client, make_user, auth_headers):
        response = client.post(
            "/api/jobs",
            json={"title": "T", "description": "D", "location": "L", "applicationDeadline": _future(5)},
            headers=auth_headers(make_user(UserRole.EMPLOYER)),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please create a company profile first"

    def test_create_job_rejects_past_deadline(self, client, employer, company, auth_headers):
        response = client.post(
            "/api/jobs",
            json={"title": "T", "description": "D", "location": "L", "applicationDeadline": _future(-1)},
            headers=auth_headers(employer),
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "applicationDeadline"

    def test_candidate_cannot_post(self, client, candidate, auth_headers):
        response = client.post(
            "/api/jobs",
            json={"title": "T", "description": "D", "location": "L", "applicationDeadline": _future(5)},
            headers=auth_headers(candidate),
        )

        assert response.status_code == 403

    def test_other_employer_cannot_edit(self, client, job, make_user, auth_headers):
        intruder = make_user(UserRole.EMPLOYER)

        response = client.put(f"/api/jobs/{job.id}", json={"title": "Hijacked"}, headers=auth_headers(intruder))

        assert response.status_code == 403

    def test_get_job_reports_expiry(self, client, company, make_job):
        expired = make_job(company, deadline_days=-2)

        data = client.get(f"/api/jobs/{expired.id}").json()["data"]

        assert data["isExpired"] is True
        assert data["canApply"] is False

    def test_unknown_job(self, client):
        response = client.get("/api/jobs/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["message"] == "Job not found"

    def test_delete_job(self, client, employer, job, auth_headers):
        assert client.delete(f"/api/jobs/{job.id}", headers=auth_headers(employer)).status_code == 200
        assert client.get(f"/api/jobs/{job.id}").status_code == 404


class TestDeadlineLock:
    """Deadline edits once applications exist."""

    def test_employer_blocked_after_applications(self, client, employer, candidate, job, auth_headers):
        assert _apply(client, auth_headers, candidate, job).status_code == 201

        response = client.put(
            f"/api/jobs/{job.id}",
            json={"applicationDeadline": _future(60)},
            headers=auth_headers(employer),
        )

        assert response.status_code == 400
        assert response.json()["message"] == DEADLINE_LOCKED_MESSAGE

    def test_same_day_change_allowed(self, client, employer, candidate, job, auth_headers):
        _apply(client, auth_headers, candidate, job)
        same_day = job.application_deadline.replace(hour=23, minute=59, second=0, microsecond=0)

        response = client.put(
            f"/api/jobs/{job.id}",
            json={"applicationDeadline": same_day.isoformat()},
            headers=auth_headers(employer),
        )

        assert response.status_code == 200

    def test_admin_may_move_deadline(self, client, make_user, candidate, job, auth_headers):
        _apply(client, auth_headers, candidate, job)
        admin = make_user(UserRole.ADMIN)

        response = client.put(
            f"/api/jobs/{job.id}",
            json={"applicationDeadline": _future(60)},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200

    def test_employer_free_without_applications(self, client, employer, job, auth_headers):
        response = client.put(
            f"/api/jobs/{job.id}",
            json={"applicationDeadline": _future(60), "status": "Closed"},
            headers=auth_headers(employer),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == JobStatus.CLOSED.value


class TestApplications:
    """Candidates apply; employers review."""

    def test_apply_notifies_employer_once(self, client, employer, candidate, job, auth_headers, db_session):
        response = _apply(client, auth_headers, candidate, job)

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "Applied"

        received = db_session.query(Notification).filter(
            Notification.recipient_id == employer.id,
            Notification.type == NotificationType.APPLICATION_RECEIVED.value,
        ).all()
        assert len(received) == 1
        assert "Cody" in received[0].message

    def test_duplicate_application(self, client, candidate, job, auth_headers, db_session):
        _apply(client, auth_headers, candidate, job)

        response = _apply(client, auth_headers, candidate, job)

        assert response.status_code == 409
        assert response.json()["message"] == "You have already applied to this job"
        assert db_session.query(Application).count() == 1

    def test_cannot_apply_to_closed_or_expired(self, client, candidate, company, make_job, auth_headers):
        closed = make_job(company, status=JobStatus.CLOSED)
        expired = make_job(company, deadline_days=-1)

        assert _apply(client, auth_headers, candidate, closed).status_code == 400
        assert _apply(client, auth_headers, candidate, expired).status_code == 400

    def test_employer_cannot_apply(self, client, employer, job, auth_headers):
        assert _apply(client, auth_headers, employer, job).status_code == 403

    def test_check_applied(self, client, candidate, job, auth_headers):
        before = client.get(f"/api/applications/check/{job.id}", headers=auth_headers(candidate)).json()
        _apply(client, auth_headers, candidate, job)
        after = client.get(f"/api/applications/check/{job.id}", headers=auth_headers(candidate)).json()

        assert before["hasApplied"] is False
        assert before["data"] is None
        assert after["hasApplied"] is True

    def test_feed_excludes_applied_jobs(self, client, candidate, company, job, make_job, auth_headers):
        other = make_job(company, title="Frontend Engineer")
        _apply(client, auth_headers, candidate, job)

        body = client.get("/api/jobs/feed", headers=auth_headers(candidate)).json()

        assert [item["id"] for item in body["data"]] == [str(other.id)]

    def test_status_update_notifies_candidate(self, client, employer, candidate, job, auth_headers, db_session):
        application_id = _apply(client, auth_headers, candidate, job).json()["data"]["id"]

        response = client.put(
            f"/api/applications/{application_id}/status",
            json={"status": "Interviewing"},
            headers=auth_headers(employer),
        )
        client.put(
            f"/api/applications/{application_id}/status",
            json={"status": "Interviewing"},
            headers=auth_headers(employer),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Interviewing"
        updates = db_session.query(Notification).filter(
            Notification.recipient_id == candidate.id,
            Notification.type == NotificationType.APPLICATION_STATUS_UPDATE.value,
        ).all()
        assert len(updates) == 1

    def test_other_employer_cannot_change_status(self, client, candidate, job, make_user, auth_headers):
        application_id = _apply(client, auth_headers, candidate, job).json()["data"]["id"]

        response = client.put(
            f"/api/applications/{application_id}/status",
            json={"status": "Rejected"},
            headers=auth_headers(make_user(UserRole.EMPLOYER)),
        )

        assert response.status_code == 403

    def test_job_applications_listing(self, client, employer, candidate, job, auth_headers):
        _apply(client, auth_headers, candidate, job)

        body = client.get(f"/api/applications/job/{job.id}", headers=auth_headers(employer)).json()

        assert body["count"] == 1
        assert body["data"][0]["candidate"]["name"] == "Cody"

    def test_my_applications(self, client, candidate, job, auth_headers):
        _apply(client, auth_headers, candidate, job)

        body = client.get("/api/applications/my-applications", headers=auth_headers(candidate)).json()

        assert body["total"] == 1
        assert body["data"][0]["job"]["title"] == "Backend Engineer"

    def test_my_applications_filters(self, client, employer, candidate, company, job, make_job, auth_headers):
        other_job = make_job(company, title="Data Engineer")
        first = _apply(client, auth_headers, candidate, job).json()["data"]
        _apply(client, auth_headers, candidate, other_job)
        client.put(f"/api/applications/{first['id']}/status", json={"status": "Rejected"}, headers=auth_headers(employer))
        headers = auth_headers(candidate)

        rejected = client.get("/api/applications/my-applications", params={"status": "rejected"}, headers=headers).json()
        by_job = client.get("/api/applications/my-applications", params={"jobId": str(other_job.id)}, headers=headers).json()

        assert [item["id"] for item in rejected["data"]] == [first["id"]]
        assert [item["job"]["title"] for item in by_job["data"]] == ["Data Engineer"]

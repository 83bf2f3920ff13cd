"""Tests for admin user management, reports and site content."""

import pytest

from portal_backend.core.enums import UserRole
from portal_backend.services.report_service import ReportService


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, name="Root")


class TestUserManagement:
    def test_list_filters_by_role(self, client, admin, make_user, auth_headers):
        make_user(UserRole.EMPLOYER)
        make_user(UserRole.CANDIDATE)

        body = client.get("/api/users", params={"role": "employer"}, headers=auth_headers(admin)).json()

        assert body["total"] == 1
        assert body["data"][0]["role"] == "employer"
        assert "hashedPassword" not in body["data"][0]

    def test_block_user(self, client, admin, make_user, auth_headers):
        user = make_user(email="target@example.com", password="secret123")

        response = client.put(f"/api/users/{user.id}", json={"status": "blocked"}, headers=auth_headers(admin))

        assert response.json()["data"]["status"] == "blocked"
        login = client.post("/api/auth/login", json={"email": "target@example.com", "password": "secret123"})
        assert login.status_code == 403

    def test_admin_cannot_demote_self(self, client, admin, auth_headers):
        response = client.put(f"/api/users/{admin.id}", json={"role": "candidate"}, headers=auth_headers(admin))

        assert response.status_code == 400

    def test_delete_user(self, client, admin, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(admin)

        assert client.delete(f"/api/users/{user.id}", headers=headers).status_code == 200
        assert client.get(f"/api/users/{user.id}", headers=headers).status_code == 404
        assert client.delete(f"/api/users/{admin.id}", headers=headers).status_code == 400


class TestReports:
    def test_stats(self, client, admin, make_user, make_company, make_job, auth_headers):
        employer = make_user(UserRole.EMPLOYER)
        make_job(make_company(employer))

        data = client.get("/api/reports/stats", headers=auth_headers(admin)).json()["data"]

        assert data["users"]["total"] == 2
        assert {"role": "admin", "count": 1} in data["users"]["byRole"]
        assert data["jobs"]["active"] == 1
        assert data["applications"]["total"] == 0

    def test_activity_feed(self, client, admin, make_user, make_company, make_job, auth_headers):
        employer = make_user(UserRole.EMPLOYER, name="Emma")
        make_job(make_company(employer, name="Umbrella"), title="Chemist")

        items = client.get("/api/reports/activity", headers=auth_headers(admin)).json()["data"]

        messages = [item["message"] for item in items]
        assert "New job posted: Chemist at Umbrella" in messages
        assert "New employer joined: Emma" in messages
        assert len(items) <= 10

    def test_growth_counts_this_month(self, admin, db_session):
        growth = ReportService().user_growth(db_session)

        assert sum(bucket["users"] for bucket in growth) == 1


class TestContent:
    def test_defaults_then_upsert(self, client, admin, auth_headers):
        headers = auth_headers(admin)

        assert client.get("/api/content", headers=headers).json()["data"] == {"about": "", "terms": "", "privacy": ""}

        saved = client.put("/api/content", json={"key": "terms", "value": "Be nice"}, headers=headers).json()["data"]
        client.put("/api/content", json={"key": "terms", "value": "Be kind"}, headers=headers)

        assert saved["lastUpdatedBy"] == str(admin.id)
        assert client.get("/api/content", headers=headers).json()["data"]["terms"] == "Be kind"

    def test_unknown_key_rejected(self, client, admin, auth_headers):
        response = client.put("/api/content", json={"key": "faq", "value": "?"}, headers=auth_headers(admin))

        assert response.status_code == 400

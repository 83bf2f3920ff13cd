"""Tests for signup, login, tokens, role gates and password reset."""

from datetime import timedelta

import pytest

from portal_backend.auth.models import User
from portal_backend.auth.utils import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from portal_backend.core.enums import UserRole, UserStatus
from portal_backend.models.candidate_profile import CandidateProfile


class TestPasswordsAndTokens:
    """Helpers in auth.utils."""

    def test_password_hashing(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed)
        assert not verify_password("wrongpassword", hashed)

    def test_access_token_round_trip(self, make_user, test_settings):
        user = make_user(UserRole.EMPLOYER)

        token_data = verify_token(create_access_token(user, test_settings), test_settings)

        assert token_data.user_id == user.id
        assert token_data.role == UserRole.EMPLOYER.value

    def test_refresh_token_is_not_an_access_token(self, make_user, test_settings):
        user = make_user()
        refresh = create_refresh_token(user, test_settings)

        assert verify_token(refresh, test_settings) is None
        assert verify_token(refresh, test_settings, token_type="refresh").user_id == user.id

    def test_expired_token_rejected(self, make_user, test_settings):
        user = make_user()
        token = create_access_token(user, test_settings, expires_delta=timedelta(seconds=-5))

        assert verify_token(token, test_settings) is None


class TestSignupAndLogin:
    """/api/auth endpoints."""

    def test_signup_candidate(self, client, db_session):
        response = client.post(
            "/api/auth/signup",
            json={"name": "Ada", "email": "Ada@Example.com", "password": "secret123", "role": "candidate"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["token"] and body["refreshToken"]
        assert body["user"]["email"] == "ada@example.com"
        assert "hashedPassword" not in body["user"]

        user = db_session.query(User).filter(User.email == "ada@example.com").one()
        assert db_session.query(CandidateProfile).filter(CandidateProfile.user_id == user.id).count() == 1

    def test_signup_sends_welcome_notification(self, client):
        body = client.post(
            "/api/auth/signup",
            json={"name": "Bo", "email": "bo@example.com", "password": "secret123", "role": "employer"},
        ).json()

        inbox = client.get("/api/notifications", headers={"Authorization": f"Bearer {body['token']}"}).json()

        assert [item["type"] for item in inbox["data"]] == ["WELCOME"]
        assert inbox["unreadCount"] == 1

    def test_signup_duplicate_email(self, client, make_user):
        make_user(email="taken@example.com")

        response = client.post(
            "/api/auth/signup",
            json={"name": "Again", "email": "taken@example.com", "password": "secret123"},
        )

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "User already exists"}

    def test_signup_rejects_admin_role(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"name": "Eve", "email": "eve@example.com", "password": "secret123", "role": "admin"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_login(self, client, make_user):
        make_user(email="login@example.com", password="pa55word")

        response = client.post("/api/auth/login", json={"email": "login@example.com", "password": "pa55word"})

        assert response.status_code == 200
        assert response.json()["user"]["lastLogin"] is not None

    def test_login_wrong_password(self, client, make_user):
        make_user(email="login@example.com", password="pa55word")

        response = client.post("/api/auth/login", json={"email": "login@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_blocked_user_cannot_login(self, client, make_user):
        make_user(email="blocked@example.com", password="pa55word", status=UserStatus.BLOCKED)

        response = client.post("/api/auth/login", json={"email": "blocked@example.com", "password": "pa55word"})

        assert response.status_code == 403

    def test_refresh_token(self, client, make_user, test_settings):
        user = make_user()

        response = client.post("/api/auth/refresh-token", json={"refreshToken": create_refresh_token(user, test_settings)})

        assert response.status_code == 200
        assert verify_token(response.json()["token"], test_settings).user_id == user.id

    def test_refresh_with_access_token_fails(self, client, make_user, test_settings):
        user = make_user()

        response = client.post("/api/auth/refresh-token", json={"refreshToken": create_access_token(user, test_settings)})

        assert response.status_code == 401


class TestRouteGuards:
    """Authentication before role checks, and blocked users everywhere."""

    def test_missing_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_me(self, client, make_user, auth_headers):
        user = make_user(name="Grace")

        body = client.get("/api/auth/me", headers=auth_headers(user)).json()

        assert body["data"]["name"] == "Grace"

    def test_logout(self, client, make_user, auth_headers):
        response = client.get("/api/auth/logout", headers=auth_headers(make_user()))

        assert response.json() == {"success": True, "data": {}}

    def test_blocked_user_token_rejected(self, client, make_user, auth_headers):
        user = make_user(status=UserStatus.BLOCKED)

        assert client.get("/api/auth/me", headers=auth_headers(user)).status_code == 403

    @pytest.mark.parametrize("path", ["/api/users", "/api/reports/stats", "/api/content"])
    def test_admin_routes_reject_candidates(self, client, make_user, auth_headers, path):
        response = client.get(path, headers=auth_headers(make_user(UserRole.CANDIDATE)))

        assert response.status_code == 403

    def test_admin_route_without_token_is_401(self, client):
        assert client.get("/api/users").status_code == 401

    def test_employer_cannot_use_candidate_routes(self, client, make_user, auth_headers):
        response = client.get("/api/candidate/profile", headers=auth_headers(make_user(UserRole.EMPLOYER)))

        assert response.status_code == 403


class TestPasswordReset:
    """forgot-password then reset-password."""

    def test_reset_flow(self, client, make_user, email_sender):
        make_user(email="forgot@example.com", password="oldpass1")

        response = client.post("/api/auth/forgot-password", json={"email": "forgot@example.com"})
        assert response.status_code == 200
        assert response.json()["data"] == "Email sent"

        link = next(line for line in email_sender.sent[0]["body"].splitlines() if "/reset-password/" in line)
        assert link.startswith("http://portal.test/reset-password/")
        token = link.rsplit("/", 1)[1]

        reset = client.put(f"/api/auth/reset-password/{token}", json={"password": "newpass1"})
        assert reset.status_code == 200

        login = client.post("/api/auth/login", json={"email": "forgot@example.com", "password": "newpass1"})
        assert login.status_code == 200

        reused = client.put(f"/api/auth/reset-password/{token}", json={"password": "another1"})
        assert reused.status_code == 400
        assert reused.json()["message"] == "Invalid token"

    def test_unknown_email(self, client):
        response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 404
        assert response.json()["message"] == "There is no user with that email"

    def test_email_failure_discards_token(self, client, make_user, email_sender, db_session):
        user = make_user(email="fail@example.com")
        email_sender.fail = True

        response = client.post("/api/auth/forgot-password", json={"email": "fail@example.com"})

        assert response.status_code == 502
        assert response.json()["message"] == "Email could not be sent"
        db_session.expire_all()
        assert db_session.get(User, user.id).reset_password_token is None

"""Tests for notification fan-out, delivery channels, device tokens and the inbox API."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import NotificationType, UserRole, UserStatus
from portal_backend.models.device_token import DeviceToken
from portal_backend.models.notification import Notification
from portal_backend.notifications.channels import DeliveryChannel, normalize_channels
from portal_backend.notifications.dispatcher import NotificationDispatcher
from portal_backend.notifications.outbox import NotificationOutbox, NotificationRequest, RoleBroadcast
from portal_backend.notifications.push import TokenResult, parse_fcm_error


def _future(days: float) -> str:
    return (utcnow() + timedelta(days=days)).isoformat()


def _seed(db_session, recipient, count=1, **fields):
    created = []
    for number in range(count):
        notification = Notification(
            recipient_id=recipient.id,
            type=fields.get("type", NotificationType.GENERAL.value),
            title=fields.get("title", f"Notice {number}"),
            message=fields.get("message", "Something happened"),
            expires_at=fields.get("expires_at", utcnow() + timedelta(days=30)),
            created_at=utcnow() - timedelta(minutes=count - number),
        )
        db_session.add(notification)
        created.append(notification)
    db_session.commit()
    return created


class TestChannels:
    def test_defaults(self):
        assert normalize_channels(None) == [DeliveryChannel.IN_APP, DeliveryChannel.PUSH]
        assert normalize_channels(None, include_email=True)[-1] == DeliveryChannel.EMAIL

    def test_unknown_and_duplicate_names_dropped(self):
        assert normalize_channels(["push", "sms", "push", "in_app"]) == [DeliveryChannel.PUSH, DeliveryChannel.IN_APP]


class TestOutboxAndDispatcher:
    """Queued work and the error boundary around it."""

    def test_outbox_without_background_tasks_keeps_pending(self):
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock()
        outbox = NotificationOutbox(dispatcher)

        outbox.notify_user("user-1", NotificationType.GENERAL, "Hi", "There")
        outbox.notify_role(UserRole.ADMIN, NotificationType.JOB_POSTED, "Job", "Posted", exclude_user_ids=["user-2"])

        assert [type(item) for item in outbox.pending] == [NotificationRequest, RoleBroadcast]
        assert outbox.pending[1].exclude_user_ids == ("user-2",)
        assert asyncio.run(outbox.flush()) == 2
        assert dispatcher.dispatch.await_count == 2
        assert outbox.pending == []

    def test_dispatch_swallows_delivery_errors(self, services):
        service = MagicMock()
        service.notify_user = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = NotificationDispatcher(services.db, service)

        asyncio.run(dispatcher.dispatch(NotificationRequest("user-1", NotificationType.GENERAL, "Hi", "There")))

        service.notify_user.assert_awaited_once()


class TestFanOut:
    """Role broadcasts reach each eligible user exactly once."""

    def test_job_post_notifies_each_admin_once(self, client, make_user, make_company, auth_headers, db_session):
        admins = [make_user(UserRole.ADMIN), make_user(UserRole.ADMIN)]
        blocked_admin = make_user(UserRole.ADMIN, status=UserStatus.BLOCKED)
        employer = make_user(UserRole.EMPLOYER)
        make_company(employer)

        response = client.post(
            "/api/jobs",
            json={"title": "Ops", "description": "Keep it running", "location": "Remote", "applicationDeadline": _future(7)},
            headers=auth_headers(employer),
        )
        assert response.status_code == 201

        posted = db_session.query(Notification).filter(Notification.type == NotificationType.JOB_POSTED.value).all()
        assert sorted(str(n.recipient_id) for n in posted) == sorted(str(admin.id) for admin in admins)
        assert all(n.delivery_channels == ["in_app"] for n in posted)
        assert blocked_admin.id not in {n.recipient_id for n in posted}

    def test_admin_posting_is_not_notified_about_own_job(self, client, make_user, make_company, auth_headers, db_session):
        poster = make_user(UserRole.ADMIN)
        other_admin = make_user(UserRole.ADMIN)
        make_company(poster)

        client.post(
            "/api/jobs",
            json={"title": "Ops", "description": "D", "location": "L", "applicationDeadline": _future(7)},
            headers=auth_headers(poster),
        )

        recipients = [n.recipient_id for n in db_session.query(Notification).filter(
            Notification.type == NotificationType.JOB_POSTED.value
        )]
        assert recipients == [other_admin.id]

    def test_notify_role_counts(self, services, make_user, db_session):
        make_user(UserRole.CANDIDATE)
        make_user(UserRole.CANDIDATE)
        excluded = make_user(UserRole.CANDIDATE)

        created = asyncio.run(services.notifications.notify_role(
            db_session,
            UserRole.CANDIDATE,
            NotificationType.GENERAL,
            "Maintenance",
            "Back soon",
            channels=["in_app"],
            exclude_user_ids=[excluded.id],
        ))

        assert created == 2

    def test_missing_recipient_is_skipped(self, services, db_session):
        from uuid import uuid4

        result = asyncio.run(services.notifications.notify_user(
            db_session, uuid4(), NotificationType.GENERAL, "Hi", "Nobody home"
        ))

        assert result is None


class TestPushDelivery:
    """Device tokens, partial failures and pruning."""

    def test_invalid_tokens_are_disabled(self, services, make_user, push_provider, db_session):
        user = make_user()
        for token in ("good-token", "bad-token"):
            db_session.add(DeviceToken(user_id=user.id, role=user.role, fcm_token=token, platform="android"))
        db_session.commit()
        push_provider.invalid_tokens.add("bad-token")

        notification = asyncio.run(services.notifications.notify_user(
            db_session, user.id, NotificationType.GENERAL, "Hello", "World"
        ))

        assert sorted(push_provider.sent[0][0]) == ["bad-token", "good-token"]
        assert notification.delivery_results["push"]["status"] == "partial"
        assert notification.delivery_results["push"]["invalidTokens"] == 1
        assert notification.delivery_results["in_app"]["status"] == "no_destinations"
        assert notification.is_sent is True

        db_session.expire_all()
        states = {t.fcm_token: t.enabled for t in db_session.query(DeviceToken)}
        assert states == {"good-token": True, "bad-token": False}

    def test_no_tokens(self, services, make_user, push_provider, db_session):
        user = make_user()

        notification = asyncio.run(services.notifications.notify_user(
            db_session, user.id, NotificationType.GENERAL, "Hello", "World"
        ))

        assert push_provider.sent == []
        assert notification.delivery_results["push"]["status"] == "no_destinations"
        assert notification.is_sent is False

    def test_payload_carries_deep_link(self, services, make_user, push_provider, db_session):
        user = make_user()
        db_session.add(DeviceToken(user_id=user.id, role=user.role, fcm_token="tok", platform="ios"))
        db_session.commit()

        notification = asyncio.run(services.notifications.notify_user(
            db_session, user.id, NotificationType.GENERAL, "Hello", "World", data={"count": 3}
        ))

        payload = push_provider.sent[0][1]
        assert payload.data["notificationId"] == str(notification.id)
        assert payload.data["count"] == "3"

    @pytest.mark.parametrize(
        ("error", "code", "invalid"),
        [
            ({"status": "NOT_FOUND", "details": [{"errorCode": "UNREGISTERED"}]}, "UNREGISTERED", True),
            (
                {
                    "status": "INVALID_ARGUMENT",
                    "details": [{"fieldViolations": [{"field": "message.token", "description": "bad"}]}],
                },
                "INVALID_REGISTRATION",
                True,
            ),
            (
                {
                    "status": "INVALID_ARGUMENT",
                    "details": [
                        {"errorCode": "INVALID_ARGUMENT"},
                        {"fieldViolations": [{"field": "message.data", "description": "bad"}]},
                    ],
                },
                "INVALID_ARGUMENT",
                False,
            ),
            ({"status": "UNAVAILABLE"}, "UNAVAILABLE", False),
        ],
    )
    def test_fcm_error_classification(self, error, code, invalid):
        response = httpx.Response(400, json={"error": error})

        parsed = parse_fcm_error(response)

        assert parsed == code
        assert TokenResult(token="t", success=False, error_code=parsed).invalid is invalid

    def test_register_and_unregister_token(self, client, make_user, auth_headers):
        user = make_user()

        registered = client.post(
            "/api/notifications/register-token",
            json={"fcmToken": "device-1", "platform": "ios"},
            headers=auth_headers(user),
        )
        removed = client.request(
            "DELETE",
            "/api/notifications/unregister-token",
            json={"fcmToken": "device-1"},
            headers=auth_headers(user),
        )

        assert registered.status_code == 201
        assert registered.json()["data"]["platform"] == "ios"
        assert removed.json()["removed"] is True

    def test_token_moves_to_new_user(self, client, make_user, auth_headers, db_session):
        first, second = make_user(), make_user(UserRole.EMPLOYER)

        for user in (first, second):
            client.post("/api/notifications/register-token", json={"fcmToken": "shared"}, headers=auth_headers(user))

        db_session.expire_all()
        tokens = db_session.query(DeviceToken).all()
        assert len(tokens) == 1
        assert tokens[0].user_id == second.id
        assert tokens[0].role == "employer"


class TestInbox:
    """Listing, counting, marking and deleting."""

    def test_list_and_unread_count(self, client, make_user, auth_headers, db_session):
        user = make_user()
        _seed(db_session, user, count=3)
        _seed(db_session, user, title="Old", expires_at=utcnow() - timedelta(days=1))
        _seed(db_session, make_user())

        body = client.get("/api/notifications", headers=auth_headers(user)).json()

        assert body["total"] == 3
        assert body["unreadCount"] == 3
        assert "Old" not in [item["title"] for item in body["data"]]

    def test_mark_one_read(self, client, make_user, auth_headers, db_session):
        user = make_user()
        notification = _seed(db_session, user, count=2)[0]
        headers = auth_headers(user)

        response = client.put(f"/api/notifications/{notification.id}/read", headers=headers)

        assert response.json()["data"]["isRead"] is True
        assert client.get("/api/notifications/unread-count", headers=headers).json()["count"] == 1

    def test_mark_many_and_all_read(self, client, make_user, auth_headers, db_session):
        user = make_user()
        first, second, _ = _seed(db_session, user, count=3)
        headers = auth_headers(user)

        many = client.put(
            "/api/notifications/mark-read",
            json={"notificationIds": [str(first.id), str(second.id)]},
            headers=headers,
        )
        rest = client.put("/api/notifications/mark-all-read", headers=headers)

        assert many.json()["updated"] == 2
        assert rest.json()["updated"] == 1
        assert client.get("/api/notifications/unread-count", headers=headers).json()["count"] == 0

    def test_cannot_touch_other_users_notifications(self, client, make_user, auth_headers, db_session):
        owner, other = make_user(), make_user()
        notification = _seed(db_session, owner)[0]

        assert client.put(f"/api/notifications/{notification.id}/read", headers=auth_headers(other)).status_code == 404
        assert client.delete(f"/api/notifications/{notification.id}", headers=auth_headers(other)).status_code == 404

    def test_filter_by_read_state(self, client, make_user, auth_headers, db_session):
        user = make_user()
        first = _seed(db_session, user, count=2)[0]
        headers = auth_headers(user)
        client.put(f"/api/notifications/{first.id}/read", headers=headers)

        body = client.get("/api/notifications", params={"isRead": "false"}, headers=headers).json()

        assert body["total"] == 1

    def test_sort_order(self, client, make_user, auth_headers, db_session):
        user = make_user()
        _seed(db_session, user, count=3)
        headers = auth_headers(user)

        newest_first = client.get("/api/notifications", headers=headers).json()
        oldest_first = client.get("/api/notifications", params={"sort": "createdAt"}, headers=headers).json()

        assert [item["title"] for item in newest_first["data"]] == ["Notice 2", "Notice 1", "Notice 0"]
        assert [item["title"] for item in oldest_first["data"]] == ["Notice 0", "Notice 1", "Notice 2"]

    def test_clear_all(self, client, make_user, auth_headers, db_session):
        user = make_user()
        _seed(db_session, user, count=4)

        body = client.delete("/api/notifications/clear-all", headers=auth_headers(user)).json()

        assert body["deleted"] == 4

    @pytest.mark.parametrize("path", ["/api/notifications", "/api/notifications/unread-count"])
    def test_requires_authentication(self, client, path):
        assert client.get(path).status_code == 401

"""Tests for the WebSocket gateway: handshake, chat relay and live notifications."""

from datetime import timedelta

import pytest
from starlette.websockets import WebSocketDisconnect

from portal_backend.auth.models import User
from portal_backend.auth.utils import create_access_token
from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import UserRole, UserStatus
from portal_backend.models.notification import Notification
from portal_backend.realtime.hub import RealtimeHub, user_room
from portal_backend.services.chat_service import ChatService


class TestHub:
    """Room bookkeeping without sockets."""

    def test_register_joins_user_and_admin_rooms(self):
        hub = RealtimeHub()

        admin = hub.register(object(), "admin-id", "admin")
        hub.register(object(), "cand-id", "candidate")

        assert hub.room_size(user_room("admin-id")) == 1
        assert hub.room_size("admin") == 1
        hub.unregister(admin)
        assert hub.room_size("admin") == 0
        assert len(hub.connections) == 1


class TestHandshake:
    def test_rejects_missing_token(self, client):
        with pytest.raises(WebSocketDisconnect) as excinfo:
            with client.websocket_connect("/ws"):
                pass

        assert excinfo.value.code == 1008

    def test_rejects_blocked_user(self, client, make_user, test_settings):
        user = make_user(status=UserStatus.BLOCKED)

        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"/ws?token={create_access_token(user, test_settings)}"):
                pass

    def test_accepts_bearer_header(self, client, make_user, auth_headers, services):
        user = make_user()

        with client.websocket_connect("/ws", headers=auth_headers(user)) as ws:
            ws.send_text("{}")
            assert ws.receive_json()["event"] == "error"
            assert services.hub.room_size(user_room(user.id)) == 1
            assert client.get("/health").json()["realtimeConnections"] == 1


class TestEvents:
    def _connect(self, client, user, settings):
        return client.websocket_connect(f"/ws?token={create_access_token(user, settings)}")

    def _wait_registered(self, ws):
        """One request/response round trip; the server registers the socket before reading frames."""
        ws.send_text("{}")
        assert ws.receive_json()["event"] == "error"

    def test_invalid_frames(self, client, make_user, test_settings):
        with self._connect(client, make_user(), test_settings) as ws:
            ws.send_text("not json")
            assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid JSON"}}

            ws.send_json({"event": "dance", "data": {}})
            assert ws.receive_json()["data"]["message"] == "Unknown event: dance"

    def test_deleted_sender_gets_error_frame(self, client, make_user, test_settings, db_session):
        sender = make_user(UserRole.CANDIDATE)
        receiver = make_user(UserRole.EMPLOYER)

        with self._connect(client, sender, test_settings) as ws:
            self._wait_registered(ws)
            db_session.query(User).filter(User.id == sender.id).delete()
            db_session.commit()

            ws.send_json({"event": "send_message", "data": {"receiverId": str(receiver.id), "content": "Hi"}})
            frame = ws.receive_json()

        assert frame == {"event": "error", "data": {"message": "Not authorized, user not found"}}

    def test_unexpected_error_keeps_connection_open(self, client, make_user, test_settings, monkeypatch):
        sender = make_user(UserRole.CANDIDATE)
        receiver = make_user(UserRole.EMPLOYER)

        def explode(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(ChatService, "save_message", explode)

        with self._connect(client, sender, test_settings) as ws:
            ws.send_json({"event": "send_message", "data": {"receiverId": str(receiver.id), "content": "Hi"}})
            failed = ws.receive_json()
            ws.send_text("still there?")
            follow_up = ws.receive_json()

        assert failed == {"event": "error", "data": {"message": "Server Error"}}
        assert follow_up == {"event": "error", "data": {"message": "Invalid JSON"}}

    def test_chat_relay(self, client, make_user, test_settings):
        candidate = make_user(UserRole.CANDIDATE)
        employer = make_user(UserRole.EMPLOYER)

        with self._connect(client, employer, test_settings) as employer_ws:
            self._wait_registered(employer_ws)
            with self._connect(client, candidate, test_settings) as candidate_ws:
                candidate_ws.send_json({"event": "join_room", "data": {"userId": str(employer.id)}})
                candidate_ws.send_json({
                    "event": "send_message",
                    "data": {"receiverId": str(employer.id), "content": "Hi!"},
                })

                received = employer_ws.receive_json()
                echoed = candidate_ws.receive_json()

        assert received["event"] == "receive_message"
        assert received["data"]["content"] == "Hi!"
        assert received["data"]["senderId"] == str(candidate.id)
        assert echoed == received

    def test_notification_read_event(self, client, make_user, test_settings, db_session):
        user = make_user()
        notification = Notification(
            recipient_id=user.id,
            title="Hello",
            message="World",
            expires_at=utcnow() + timedelta(days=1),
        )
        db_session.add(notification)
        db_session.commit()

        with self._connect(client, user, test_settings) as ws:
            ws.send_json({"event": "notification:read", "data": {"id": str(notification.id)}})
            updated = ws.receive_json()
            ws.send_json({"event": "notification:read_all"})
            all_read = ws.receive_json()

        assert updated == {"event": "notification:updated", "data": {"id": str(notification.id), "isRead": True}}
        assert all_read == {"event": "notification:all_read", "data": {}}
        db_session.expire_all()
        assert db_session.get(Notification, notification.id).is_read is True

    def test_live_notification_on_application(self, client, make_user, make_company, make_job, auth_headers, test_settings):
        employer = make_user(UserRole.EMPLOYER)
        candidate = make_user(UserRole.CANDIDATE, name="Live Candidate")
        job = make_job(make_company(employer))

        with self._connect(client, employer, test_settings) as ws:
            self._wait_registered(ws)
            response = client.post("/api/applications", json={"jobId": str(job.id)}, headers=auth_headers(candidate))
            assert response.status_code == 201
            frame = ws.receive_json()

        assert frame["event"] == "notification:new"
        assert frame["data"]["type"] == "APPLICATION_RECEIVED"
        assert "Live Candidate" in frame["data"]["message"]

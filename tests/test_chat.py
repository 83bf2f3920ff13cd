"""Tests for direct messaging over HTTP."""

import pytest

from portal_backend.core.enums import UserRole
from portal_backend.models.message import conversation_id_for
from portal_backend.services.chat_service import is_participant


@pytest.fixture
def pair(make_user):
    return make_user(UserRole.CANDIDATE, name="Cara"), make_user(UserRole.EMPLOYER, name="Eli")


def test_conversation_id_is_order_independent(pair):
    first, second = pair

    conversation_id = conversation_id_for(first.id, second.id)

    assert conversation_id == conversation_id_for(second.id, first.id)
    assert is_participant(conversation_id, first.id)
    assert is_participant(conversation_id, second.id)


class TestChatApi:
    def test_send_and_read(self, client, pair, auth_headers):
        candidate, employer = pair

        sent = client.post(
            "/api/chat/messages",
            json={"receiverId": str(employer.id), "content": "  Hello there  "},
            headers=auth_headers(candidate),
        )
        assert sent.status_code == 201
        message = sent.json()["data"]
        assert message["content"] == "Hello there"

        inbox = client.get("/api/chat/conversations", headers=auth_headers(employer)).json()
        assert inbox["count"] == 1
        assert inbox["data"][0]["unreadCount"] == 1
        assert inbox["data"][0]["otherUser"]["name"] == "Cara"

        thread = client.get(f"/api/chat/{message['conversationId']}/messages", headers=auth_headers(employer)).json()
        assert [item["content"] for item in thread["data"]] == ["Hello there"]
        assert thread["data"][0]["readAt"] is not None

        after = client.get("/api/chat/conversations", headers=auth_headers(employer)).json()
        assert after["data"][0]["unreadCount"] == 0

    def test_outsider_cannot_read_conversation(self, client, pair, make_user, auth_headers):
        candidate, employer = pair
        conversation_id = conversation_id_for(candidate.id, employer.id)

        response = client.get(f"/api/chat/{conversation_id}/messages", headers=auth_headers(make_user()))

        assert response.status_code == 403

    def test_cannot_message_self(self, client, pair, auth_headers):
        candidate, _ = pair

        response = client.post(
            "/api/chat/messages",
            json={"receiverId": str(candidate.id), "content": "me"},
            headers=auth_headers(candidate),
        )

        assert response.status_code == 400

    def test_blank_message_rejected(self, client, pair, auth_headers):
        candidate, employer = pair

        response = client.post(
            "/api/chat/messages",
            json={"receiverId": str(employer.id), "content": "   "},
            headers=auth_headers(candidate),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Message content is required"

    def test_unknown_receiver(self, client, pair, auth_headers):
        candidate, _ = pair

        response = client.post(
            "/api/chat/messages",
            json={"receiverId": "00000000-0000-0000-0000-000000000001", "content": "hi"},
            headers=auth_headers(candidate),
        )

        assert response.status_code == 404

    def test_initiate(self, client, pair, auth_headers):
        candidate, employer = pair

        body = client.post("/api/chat/initiate", json={"userId": str(employer.id)}, headers=auth_headers(candidate)).json()

        assert body["data"]["id"] == conversation_id_for(candidate.id, employer.id)
        assert body["data"]["otherUser"]["name"] == "Eli"

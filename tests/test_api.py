"""API endpoint tests."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from chatdesk.storage import CollectionWriteError
from chatdesk.storage.record_store import RecordStore

# ===========================================
# HEALTH
# ===========================================


class TestHealthEndpoints:
    """Test health and root endpoints."""

    def test_root(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "chatdesk-api"}

    def test_health_reports_storage(self, client: TestClient, store: RecordStore):
        store.save_chat_message("m1", "user", "hi")

        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["storage"]["records"]["chat_messages"] == 1
        assert data["checks"]["upstream"]["status"] == "healthy"

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_startup_creates_data_files(self, client: TestClient, store: RecordStore):
        assert store.messages.path.exists()
        assert store.sessions.path.exists()
        assert store.surveys.path.exists()


# ===========================================
# CHAT MESSAGES
# ===========================================


class TestMessageEndpoints:
    """Test message recording."""

    def test_save_message(self, client: TestClient, store: RecordStore):
        response = client.post(
            "/api/chat/messages",
            json={"messageId": "m1", "role": "user", "content": "hello", "sessionId": "s1"},
            headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1", "User-Agent": "browser/1.0"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["messageId_db"] == 1

        (message,) = store.get_chat_messages_by_session("s1")
        assert message.user_ip == "203.0.113.5"
        assert message.user_agent == "browser/1.0"

    def test_real_ip_header_fallback(self, client: TestClient, store: RecordStore):
        client.post(
            "/api/chat/messages",
            json={"messageId": "m1", "role": "user", "content": "hello"},
            headers={"X-Real-IP": "198.51.100.7"},
        )

        (message,) = store.get_chat_messages()
        assert message.user_ip == "198.51.100.7"
        assert message.session_id is None

    def test_invalid_role_rejected(self, client: TestClient, store: RecordStore):
        response = client.post(
            "/api/chat/messages",
            json={"messageId": "m1", "role": "system", "content": "hello"},
        )

        assert response.status_code == 422
        assert store.get_chat_messages() == []

    def test_missing_fields_rejected(self, client: TestClient):
        response = client.post("/api/chat/messages", json={"role": "user"})
        assert response.status_code == 422

    def test_write_failure_is_500(self, client: TestClient, store: RecordStore):
        with patch.object(
            store.messages,
            "save",
            side_effect=CollectionWriteError(store.messages.path, "disk full"),
        ):
            response = client.post(
                "/api/chat/messages",
                json={"messageId": "m1", "role": "user", "content": "hello"},
            )

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}


# ===========================================
# SESSIONS
# ===========================================


class TestSessionEndpoints:
    """Test session CRUD."""

    def test_create_and_list(self, client: TestClient):
        response = client.post(
            "/api/chat/sessions",
            json={"sessionId": "s1", "title": "Shipping question"},
            headers={"X-Forwarded-For": "203.0.113.5"},
        )
        assert response.status_code == 200
        session = response.json()["session"]
        assert session["id"] == "s1"
        assert session["message_count"] == 0
        assert session["user_ip"] == "203.0.113.5"

        listing = client.get("/api/chat/sessions").json()
        assert listing["success"] is True
        assert [s["id"] for s in listing["sessions"]] == ["s1"]
        assert listing["pagination"] == {"limit": 50, "offset": 0, "total": 1}

    def test_update_recounts_messages(self, client: TestClient, store: RecordStore):
        client.post("/api/chat/sessions", json={"sessionId": "s1", "title": "Draft"})
        store.save_chat_message("m1", "user", "hi", session_id="s1")

        response = client.post("/api/chat/sessions", json={"sessionId": "s1", "title": "Final"})

        session = response.json()["session"]
        assert session["title"] == "Final"
        assert session["message_count"] == 1

    def test_session_messages(self, client: TestClient, store: RecordStore):
        store.save_chat_message("m1", "user", "hi", session_id="s1")
        store.save_chat_message("m2", "assistant", "hello", session_id="s1")

        data = client.get("/api/chat/sessions/s1").json()

        assert data["sessionId"] == "s1"
        assert [m["message_id"] for m in data["messages"]] == ["m1", "m2"]

    def test_delete(self, client: TestClient, store: RecordStore):
        client.post("/api/chat/sessions", json={"sessionId": "s1", "title": "Bye"})
        store.save_chat_message("m1", "user", "hi", session_id="s1")

        response = client.delete("/api/chat/sessions", params={"sessionId": "s1"})
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert store.get_chat_messages() == []

        again = client.delete("/api/chat/sessions", params={"sessionId": "s1"})
        assert again.status_code == 404
        assert again.json() == {"detail": "Session not found"}

    def test_delete_requires_session_id(self, client: TestClient):
        response = client.delete("/api/chat/sessions")
        assert response.status_code == 422


# ===========================================
# SURVEY
# ===========================================


class TestSurveyEndpoint:
    """Test survey submission."""

    def test_submit_rates_message(self, client: TestClient, store: RecordStore):
        store.save_chat_message("m2", "assistant", "hello", session_id="s1")

        response = client.post(
            "/api/survey",
            json={"messageId": "m2", "rating": "good"},
            headers={"User-Agent": "browser/1.0"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "responseId": 1}
        (message,) = store.get_chat_messages_by_session("s1")
        assert message.survey_rating == "good"
        (survey,) = store.get_survey_responses()
        assert survey.user_agent == "browser/1.0"

    def test_invalid_rating_rejected(self, client: TestClient):
        response = client.post("/api/survey", json={"messageId": "m2", "rating": "meh"})
        assert response.status_code == 422


# ===========================================
# ADMIN
# ===========================================


class TestAdminEndpoints:
    """Test dashboard listings and statistics."""

    def test_chat_messages_paginated(self, client: TestClient, store: RecordStore):
        for i in range(5):
            store.save_chat_message(f"m{i}", "user", "hi")

        data = client.get("/api/admin/chat-messages", params={"limit": 2, "offset": 1}).json()

        assert [m["message_id"] for m in data["messages"]] == ["m3", "m2"]
        assert data["pagination"] == {"limit": 2, "offset": 1, "total": 2}
        assert data["messages"][0]["created_at"].endswith("Z")

    def test_invalid_limit_rejected(self, client: TestClient):
        response = client.get("/api/admin/chat-messages", params={"limit": 0})
        assert response.status_code == 422

    def test_chat_stats(self, client: TestClient, store: RecordStore):
        store.save_chat_message("u1", "user", "q")
        store.save_chat_message("a1", "assistant", "r")
        store.save_survey_response("a1", "good")

        data = client.get("/api/admin/chat-stats").json()

        assert data["success"] is True
        assert data["total"] == 2
        assert data["userMessages"] == 1
        assert data["assistantMessages"] == 1
        assert data["surveyResponses"] == 1
        assert data["goodRatings"] == 1
        assert data["badRatings"] == 0
        assert data["surveyResponseRate"] == 100.0
        assert {d["role"] for d in data["daily"]} == {"user", "assistant"}

    def test_survey_listing_and_stats(self, client: TestClient, store: RecordStore):
        store.save_survey_response("a", "good")
        store.save_survey_response("b", "bad")
        store.save_survey_response("c", "bad")

        listing = client.get("/api/admin/survey-responses").json()
        assert [r["message_id"] for r in listing["responses"]] == ["c", "b", "a"]

        stats = client.get("/api/admin/survey-stats").json()
        assert stats["success"] is True
        assert stats["total"] == 3
        assert stats["ratings"] == {"good": 1, "bad": 2}
        assert stats["daily"] == [
            {"date": "2024-06-01", "rating": "bad", "count": 2},
            {"date": "2024-06-01", "rating": "good", "count": 1},
        ]

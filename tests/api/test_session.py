"""
Tests for the session reset endpoint.
"""
from src.config import get_settings

COOKIE = get_settings().session_cookie_name


class TestResetSession:

    def test_reset_clears_persona_and_cookie(self, client, sse, memory_store):
        first = client.post("/api/chat/stream", json={"message": "We are a craft brewery"})
        session_id = first.cookies[COOKIE]

        response = client.delete("/api/session")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert COOKIE not in client.cookies

        second = client.post("/api/chat/stream", json={"message": "Hello"})
        complete = dict(sse(second.text))["complete"]
        assert complete["session"]["sessionId"] != session_id
        assert complete["session"]["persona"]["craft_score"] == 0.0

    def test_reset_without_cookie(self, client):
        response = client.delete("/api/session")

        assert response.status_code == 200
        assert response.json() == {"success": True}

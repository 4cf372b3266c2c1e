# tests for the health check, app configuration and error shape
# basic app-level tests

from httpx import AsyncClient, ASGITransport

from mood_journal.main import app
from mood_journal.services.db import get_db


class TestHealthCheck:
    """app health and config"""

    async def test_health_check(self, client):
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "mood-journal-api"
        assert "timestamp" in data

    async def test_openapi_schema(self, client):
        resp = await client.get("/openapi.json")
        assert resp.status_code == 200
        schema = resp.json()
        assert schema["info"]["title"] == "Mood Journal API"
        assert "/api/diary/{entry_id}/ai-feedback" in schema["paths"]

    async def test_docs_available(self, client):
        resp = await client.get("/docs")
        assert resp.status_code == 200


class TestErrorShape:
    """every error is {error, message}"""

    async def test_unknown_route(self, client):
        resp = await client.get("/api/nope")
        assert resp.status_code == 404
        data = resp.json()
        assert data["error"] == "Not Found"
        assert "message" in data

    async def test_method_not_allowed(self, client):
        resp = await client.patch("/api/health")
        assert resp.status_code == 405
        assert set(resp.json()) == {"error", "message"}

    async def test_validation_error(self, client):
        resp = await client.post("/api/diary/43/comments?token=abc123", json={"content": ["not", "text"]})
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"] == "Invalid request"
        assert "content" in data["message"]


class TestUnhandledErrors:
    """unexpected failures still come back as json"""

    async def test_database_failure_is_json_500(self, mock_db, owner_headers):
        async def broken_find_one(query=None, projection=None):
            raise RuntimeError("connection reset")

        mock_db.diaries.find_one = broken_find_one

        async def override_get_db():
            return mock_db

        app.dependency_overrides[get_db] = override_get_db
        # the server error middleware re-raises after responding
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/api/diary/42", headers=owner_headers)
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 500
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.json() == {
            "error": "Internal server error",
            "message": "Something went wrong. Please try again.",
        }

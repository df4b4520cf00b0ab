# =============================================================================
# tests/test_health.py - Health & Root Endpoint Tests
# =============================================================================

from pymongo.errors import ServerSelectionTimeoutError

from lib.mongo_client import MongoConnection


async def _ping_ok():
    return None


async def _ping_down():
    raise ServerSelectionTimeoutError("cluster0 unreachable")


class TestHealth:

    def test_root(self, client):
        body = client.get("/").json()
        assert body["message"] == "LoanLink is running"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["environment"] == "development"

    def test_liveness(self, client):
        assert client.get("/health/live").json()["status"] == "alive"

    def test_ready_when_mongodb_answers(self, client, monkeypatch):
        monkeypatch.setattr(MongoConnection, "ping", _ping_ok)

        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["mongodb"]["healthy"] is True

    def test_unavailable_when_mongodb_is_down(self, client, monkeypatch):
        monkeypatch.setattr(MongoConnection, "ping", _ping_down)

        response = client.get("/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unavailable"
        assert body["checks"]["mongodb"]["healthy"] is False
        assert "unreachable" in body["checks"]["mongodb"]["error"]

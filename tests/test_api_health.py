"""Tests for the liveness endpoint."""

from datetime import datetime


class TestHealthEndpoint:
    def test_returns_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_timestamp_is_iso_utc(self, client):
        timestamp = client.get("/health").json()["timestamp"]

        assert timestamp.endswith("Z")
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        assert parsed.utcoffset().total_seconds() == 0

    def test_does_not_touch_storage(self, settings, monkeypatch, storage):
        from fastapi.testclient import TestClient

        from tubedesk.api.app import create_app

        def fail(*args, **kwargs):
            raise AssertionError("storage should not be used")

        monkeypatch.setattr(storage, "select", fail)
        client = TestClient(create_app(settings, storage=storage))

        assert client.get("/health").status_code == 200

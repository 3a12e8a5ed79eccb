"""Tests for the fixed-window rate guard."""

import threading

import pytest
from fastapi.testclient import TestClient

from tubedesk.api.app import create_app
from tubedesk.api.ratelimit import FixedWindowRateLimiter, rate_limit_exceeded_body


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestFixedWindowRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=60, clock=FakeClock())

        decisions = [limiter.hit("client") for _ in range(5)]

        assert all(d.allowed for d in decisions)
        assert [d.remaining for d in decisions] == [4, 3, 2, 1, 0]

    def test_rejects_over_limit(self):
        limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=60, clock=FakeClock())
        for _ in range(5):
            limiter.hit("client")

        decision = limiter.hit("client")

        assert not decision.allowed
        assert decision.remaining == 0
        assert 0 < decision.reset_seconds <= 60

    def test_reset_counts_down_within_window(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
        limiter.hit("client")

        clock.advance(45.5)
        decision = limiter.hit("client")

        assert decision.reset_seconds == 15

    def test_window_expiry_resets_quota(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)
        for _ in range(3):
            limiter.hit("client")

        clock.advance(60)

        assert limiter.hit("client").allowed

    def test_clients_counted_separately(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.hit("a")

        assert not limiter.hit("a").allowed
        assert limiter.hit("b").allowed

    def test_concurrent_hits_counted_exactly(self):
        limiter = FixedWindowRateLimiter(max_requests=50, window_seconds=60)
        results = []
        lock = threading.Lock()

        def worker():
            for _ in range(10):
                decision = limiter.hit("shared")
                with lock:
                    results.append(decision.allowed)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 50
        assert results.count(False) == 50

    def test_reset_clears_windows(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.hit("client")
        limiter.reset()

        assert limiter.hit("client").allowed

    @pytest.mark.parametrize("kwargs", [{"max_requests": 0, "window_seconds": 60}, {"max_requests": 1, "window_seconds": 0}])
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(**kwargs)

    def test_exceeded_body_message(self):
        limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=60, clock=FakeClock())
        for _ in range(6):
            decision = limiter.hit("client")

        body = rate_limit_exceeded_body(decision, 60)

        assert body["code"] == 429
        assert body["error"] == "Too Many Requests"
        assert body["message"] == "Rate limit exceeded, retry in 60 seconds. Max 5 requests per minute."
        assert body["expiresIn"] == 60
        assert isinstance(body["date"], int)


class TestRateLimitedApp:
    def _client(self, settings_factory, storage, **overrides):
        settings = settings_factory(SERVER_ADDON="rate_limit", **overrides)
        return TestClient(create_app(settings, storage=storage))

    def test_sixth_request_gets_429(self, settings_factory, storage):
        client = self._client(settings_factory, storage)

        statuses = [client.get("/health").status_code for _ in range(5)]
        response = client.get("/health")

        assert statuses == [200] * 5
        assert response.status_code == 429
        body = response.json()
        assert body["code"] == 429
        assert body["error"] == "Too Many Requests"
        assert 0 < body["expiresIn"] <= 60
        assert "date" in body
        assert response.headers["retry-after"] == str(body["expiresIn"])

    def test_procedure_calls_count_toward_quota(self, settings_factory, storage):
        client = self._client(settings_factory, storage, RATE_LIMIT_MAX=2)

        assert client.get("/trpc/videos.list").status_code == 200
        assert client.get("/trpc/channels.list").status_code == 200
        assert client.get("/trpc/videos.list").status_code == 429

    def test_limit_headers_on_success(self, settings_factory, storage):
        client = self._client(settings_factory, storage)

        response = client.get("/health")

        assert response.headers["x-ratelimit-limit"] == "5"
        assert response.headers["x-ratelimit-remaining"] == "4"

    def test_rejected_request_skips_storage(self, settings_factory, storage):
        client = self._client(settings_factory, storage, RATE_LIMIT_MAX=1)
        client.get("/health")

        response = client.post(
            "/trpc/videos.create",
            json={"youtubeId": "abc", "title": "T", "publishedAt": "2024-01-01"},
        )

        assert response.status_code == 429
        assert storage.select("videos") == []

    def test_no_guard_without_addon(self, client):
        statuses = {client.get("/health").status_code for _ in range(10)}

        assert statuses == {200}

"""Fixed-window request rate guard.

Each client address gets ``max_requests`` per window. The window starts
at the client's first request and is reset, not slid, once it expires.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from tubedesk.core.timestamps import epoch_millis

logger = logging.getLogger(__name__)

# Windows are pruned once this many clients are tracked.
PRUNE_THRESHOLD = 10_000


@dataclass
class RateLimitDecision:
    """Outcome of counting one request."""

    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    """Per-key request counter with a fixed time window.

    Safe to call from concurrent requests; all counter updates happen
    under one lock.

    Args:
        max_requests: Requests allowed per window.
        window_seconds: Window length.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        """Count a request for ``key`` and decide whether it may proceed."""
        with self._lock:
            now = self._clock()
            if len(self._windows) >= PRUNE_THRESHOLD:
                self._prune(now)

            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                window = _Window(started_at=now, count=0)
                self._windows[key] = window

            window.count += 1
            elapsed = now - window.started_at
            reset_seconds = max(1, math.ceil(self.window_seconds - elapsed))

            return RateLimitDecision(
                allowed=window.count <= self.max_requests,
                limit=self.max_requests,
                remaining=max(0, self.max_requests - window.count),
                reset_seconds=reset_seconds,
            )

    def reset(self) -> None:
        """Forget every window."""
        with self._lock:
            self._windows.clear()

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    return {
        "x-ratelimit-limit": str(decision.limit),
        "x-ratelimit-remaining": str(decision.remaining),
        "x-ratelimit-reset": str(decision.reset_seconds),
    }


def rate_limit_exceeded_body(decision: RateLimitDecision, window_seconds: float) -> dict:
    """Body returned with a 429 response."""
    window_label = "minute" if window_seconds == 60 else f"{window_seconds:g} seconds"
    return {
        "code": 429,
        "error": "Too Many Requests",
        "message": (
            f"Rate limit exceeded, retry in {decision.reset_seconds} seconds. "
            f"Max {decision.limit} requests per {window_label}."
        ),
        "date": epoch_millis(),
        "expiresIn": decision.reset_seconds,
    }


def install_rate_limit(app: FastAPI, limiter: FixedWindowRateLimiter) -> None:
    """Guard every route of ``app`` with ``limiter``, keyed by client address."""

    @app.middleware("http")
    async def rate_limit_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        decision = limiter.hit(_client_key(request))
        headers = _limit_headers(decision)

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {_client_key(request)} on {request.url.path}")
            headers["retry-after"] = str(decision.reset_seconds)
            return JSONResponse(
                rate_limit_exceeded_body(decision, limiter.window_seconds),
                status_code=429,
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

"""FastAPI application factory.

Composes the server:
- GET /health liveness probe
- procedure router under /trpc
- optional add-on: rate guard, or the development panel at /panel
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.responses import Response

from tubedesk.api.panel import render_panel
from tubedesk.api.ratelimit import FixedWindowRateLimiter, install_rate_limit
from tubedesk.api.router import build_app_router
from tubedesk.config import Settings, get_settings
from tubedesk.core.timestamps import iso_timestamp
from tubedesk.db.client import StorageClient
from tubedesk.models.types import HealthStatus
from tubedesk.rpc.http import create_rpc_router
from tubedesk.rpc.router import ProcedureRouter

logger = logging.getLogger(__name__)

RPC_PREFIX = "/trpc"


def _install_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response


def create_app(
    settings: Settings | None = None,
    storage: StorageClient | None = None,
    router: ProcedureRouter | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        settings: Server settings. Defaults to the environment.
        storage: Storage client shared by all requests. Built from
            settings when omitted.
        router: Procedure router. Defaults to the full application router.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()
    if storage is None:
        storage = StorageClient.from_settings(settings)
    if router is None:
        router = build_app_router()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        storage.close()

    app = FastAPI(
        title="tubedesk",
        description="Typed procedures for the video ingestion pipeline",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.procedures = router

    app.include_router(create_rpc_router(router), prefix=RPC_PREFIX)

    # Health check endpoint
    @app.get("/health", response_model=HealthStatus)
    def health_check() -> HealthStatus:
        """Health check endpoint."""
        return HealthStatus(timestamp=iso_timestamp())

    if settings.panel_enabled:
        page = render_panel(router, prefix=RPC_PREFIX)

        @app.get("/panel", response_class=HTMLResponse, include_in_schema=False)
        def panel() -> HTMLResponse:
            """Procedure introspection page (non-production only)."""
            return HTMLResponse(page)

        logger.info("Development panel enabled at /panel")

    if settings.rate_limit_enabled:
        limiter = FixedWindowRateLimiter(
            max_requests=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
        )
        app.state.rate_limiter = limiter
        install_rate_limit(app, limiter)
        logger.info(
            f"Rate limiting enabled: {settings.rate_limit_max} requests "
            f"per {settings.rate_limit_window_seconds}s"
        )

    # Registered last so it wraps the rate guard and logs rejected requests too.
    _install_request_logging(app)

    return app

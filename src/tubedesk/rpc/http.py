"""HTTP transport for procedure routers.

GET /<prefix>/<path>?input=<json>  - queries
POST /<prefix>/<path> with a JSON body - mutations

Adding ``?batch=1`` turns ``<path>`` into a comma-separated list of
procedures whose inputs are keyed by position ("0", "1", ...).
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from tubedesk.rpc.errors import ProcedureError
from tubedesk.rpc.router import ProcedureContext, ProcedureKind, ProcedureRouter

logger = logging.getLogger(__name__)

MULTI_STATUS = 207


def create_rpc_router(router: ProcedureRouter) -> APIRouter:
    """Build a FastAPI router that serves every procedure in ``router``.

    Args:
        router: Root procedure router.

    Returns:
        APIRouter to include under a prefix such as ``/trpc``.
    """
    api = APIRouter()

    @api.get("/{path:path}", include_in_schema=False)
    async def handle_query(path: str, request: Request) -> JSONResponse:
        return await _dispatch(router, request, path, "query")

    @api.post("/{path:path}", include_in_schema=False)
    async def handle_mutation(path: str, request: Request) -> JSONResponse:
        return await _dispatch(router, request, path, "mutation")

    return api


async def _read_input(request: Request, kind: ProcedureKind) -> Any:
    """Decode the raw JSON input, or None when none was sent."""
    body = b"" if kind == "query" else await request.body()
    try:
        if kind == "query":
            raw = request.query_params.get("input")
        else:
            raw = body.decode("utf-8") or None
        if raw is None:
            return None
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProcedureError("PARSE_ERROR", f"Unable to parse input: {e}") from e


def _split_batch(raw_input: Any, count: int) -> list[Any]:
    if raw_input is None:
        return [None] * count
    if not isinstance(raw_input, dict):
        raise ProcedureError("BAD_REQUEST", '"input" needs to be an object when doing a batch call')
    return [raw_input.get(str(index)) for index in range(count)]


async def _call(
    router: ProcedureRouter,
    ctx: ProcedureContext,
    path: str,
    kind: ProcedureKind,
    raw_input: Any,
) -> tuple[int, dict[str, Any]]:
    """Run one procedure and return (HTTP status, envelope)."""
    try:
        procedure = router.resolve(path)
        if procedure.kind != kind:
            method = "GET" if kind == "query" else "POST"
            raise ProcedureError(
                "METHOD_NOT_SUPPORTED",
                f'Unsupported {method}-request to {procedure.kind} procedure at path "{path}"',
            )
        # Handlers block on storage I/O, so keep them off the event loop.
        result = await run_in_threadpool(procedure.invoke, ctx, raw_input)
    except ProcedureError as e:
        logger.info(f"Procedure {path} failed: {e.code} {e.message}")
        return e.http_status, e.to_envelope(path)
    except Exception:
        logger.exception(f"Unhandled error in procedure {path}")
        error = ProcedureError("INTERNAL_SERVER_ERROR", "Internal server error")
        return error.http_status, error.to_envelope(path)

    return 200, {"result": {"data": jsonable_encoder(result)}}


async def _dispatch(
    router: ProcedureRouter,
    request: Request,
    path: str,
    kind: ProcedureKind,
) -> JSONResponse:
    batch = request.query_params.get("batch") in ("1", "true")
    paths = path.split(",") if batch else [path]

    try:
        raw_input = await _read_input(request, kind)
        inputs = _split_batch(raw_input, len(paths)) if batch else [raw_input]
    except ProcedureError as e:
        envelopes = [e.to_envelope(p) for p in paths]
        return JSONResponse(envelopes if batch else envelopes[0], status_code=e.http_status)

    ctx = ProcedureContext(storage=request.app.state.storage, request=request)
    outcomes = [await _call(router, ctx, p, kind, raw) for p, raw in zip(paths, inputs)]

    if not batch:
        status, envelope = outcomes[0]
        return JSONResponse(envelope, status_code=status)

    statuses = {status for status, _ in outcomes}
    status = statuses.pop() if len(statuses) == 1 else MULTI_STATUS
    return JSONResponse([envelope for _, envelope in outcomes], status_code=status)

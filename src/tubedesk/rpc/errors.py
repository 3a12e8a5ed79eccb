"""Procedure error codes and the exception that carries them."""

from __future__ import annotations

from typing import Any

# name -> (JSON-RPC code, HTTP status)
ERROR_CODES: dict[str, tuple[int, int]] = {
    "PARSE_ERROR": (-32700, 400),
    "BAD_REQUEST": (-32600, 400),
    "INTERNAL_SERVER_ERROR": (-32603, 500),
    "NOT_FOUND": (-32004, 404),
    "METHOD_NOT_SUPPORTED": (-32005, 405),
}


class ProcedureError(Exception):
    """Error raised while resolving, validating or running a procedure.

    Args:
        code: One of the names in ERROR_CODES.
        message: Human-readable message sent to the caller.
        issues: Optional validation issues for BAD_REQUEST.
    """

    def __init__(self, code: str, message: str, issues: list[dict[str, Any]] | None = None):
        if code not in ERROR_CODES:
            raise ValueError(f"Unknown procedure error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.issues = issues

    @property
    def http_status(self) -> int:
        return ERROR_CODES[self.code][1]

    @property
    def rpc_code(self) -> int:
        return ERROR_CODES[self.code][0]

    def to_envelope(self, path: str | None) -> dict[str, Any]:
        """Serialize as an error envelope."""
        data: dict[str, Any] = {
            "code": self.code,
            "httpStatus": self.http_status,
            "path": path,
        }
        if self.issues is not None:
            data["issues"] = self.issues
        return {"error": {"message": self.message, "code": self.rpc_code, "data": data}}

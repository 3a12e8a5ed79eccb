"""Procedure declarations and routing.

A router maps names to procedures and to nested routers. Nested names
are flattened with dots, so a ``list`` query in a router included as
``videos`` is called as ``videos.list``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Literal

from pydantic import BaseModel, ValidationError

from tubedesk.db.client import RecordNotFoundError, StorageError
from tubedesk.rpc.errors import ProcedureError

if TYPE_CHECKING:
    from starlette.requests import Request

    from tubedesk.db.client import StorageClient


ProcedureKind = Literal["query", "mutation"]


@dataclass
class ProcedureContext:
    """Per-call context handed to every handler."""

    storage: StorageClient
    request: Request | None = None


@dataclass(frozen=True)
class Procedure:
    """A named handler with an optional input schema."""

    kind: ProcedureKind
    handler: Callable[..., Any]
    input_model: type[BaseModel] | None = None
    description: str | None = None

    def parse_input(self, raw_input: Any) -> BaseModel | None:
        """Validate raw input against the schema.

        Procedures without a schema ignore their input.

        Raises:
            ProcedureError: BAD_REQUEST with the validation issues.
        """
        if self.input_model is None:
            return None
        try:
            return self.input_model.model_validate(raw_input)
        except ValidationError as e:
            issues = [
                {"path": list(err["loc"]), "message": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            raise ProcedureError("BAD_REQUEST", "Input validation failed", issues=issues) from e

    def invoke(self, ctx: ProcedureContext, raw_input: Any) -> Any:
        """Validate input, then run the handler.

        Validation happens before the handler so an invalid call never
        reaches storage. Storage failures become procedure errors carrying
        the underlying message.
        """
        parsed = self.parse_input(raw_input)
        try:
            if self.input_model is None:
                return self.handler(ctx)
            return self.handler(ctx, parsed)
        except RecordNotFoundError as e:
            raise ProcedureError("NOT_FOUND", str(e)) from e
        except StorageError as e:
            raise ProcedureError("INTERNAL_SERVER_ERROR", str(e)) from e


class ProcedureRouter:
    """Registry of procedures and nested routers."""

    def __init__(self) -> None:
        self._entries: dict[str, Procedure | ProcedureRouter] = {}

    def add(self, name: str, procedure: Procedure) -> Procedure:
        self._claim(name)
        self._entries[name] = procedure
        return procedure

    def include(self, prefix: str, router: ProcedureRouter) -> None:
        """Mount a child router under ``prefix``."""
        self._claim(prefix)
        self._entries[prefix] = router

    def query(self, name: str, input: type[BaseModel] | None = None):
        """Decorator registering a read procedure."""
        return self._register("query", name, input)

    def mutation(self, name: str, input: type[BaseModel] | None = None):
        """Decorator registering a write procedure."""
        return self._register("mutation", name, input)

    def procedures(self) -> dict[str, Procedure]:
        """All procedures keyed by their dotted path, in declaration order."""
        flat: dict[str, Procedure] = {}
        for name, entry in self._entries.items():
            if isinstance(entry, ProcedureRouter):
                for child_name, procedure in entry.procedures().items():
                    flat[f"{name}.{child_name}"] = procedure
            else:
                flat[name] = entry
        return flat

    def resolve(self, path: str) -> Procedure:
        """Find the procedure at a dotted path.

        Raises:
            ProcedureError: NOT_FOUND if nothing is registered there.
        """
        entry: Procedure | ProcedureRouter | None = self
        for part in path.split("."):
            if not isinstance(entry, ProcedureRouter):
                entry = None
                break
            entry = entry._entries.get(part)
        if isinstance(entry, Procedure):
            return entry
        raise ProcedureError("NOT_FOUND", f'No "query"-procedure or "mutation"-procedure on path "{path}"')

    def _register(self, kind: ProcedureKind, name: str, input_model: type[BaseModel] | None):
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            doc = (func.__doc__ or "").strip().splitlines()
            self.add(
                name,
                Procedure(
                    kind=kind,
                    handler=func,
                    input_model=input_model,
                    description=doc[0] if doc else None,
                ),
            )
            return func

        return decorator

    def _claim(self, name: str) -> None:
        if not name or "." in name or "," in name:
            raise ValueError(f"Invalid procedure name: {name!r}")
        if name in self._entries:
            raise ValueError(f"Duplicate procedure name: {name}")

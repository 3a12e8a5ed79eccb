"""Row-oriented storage client.

Encapsulates all SQLAlchemy queries behind four table-addressed
operations. Rows cross this boundary as plain dicts keyed by column
name, so callers never hold ORM objects.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from tubedesk.db.schema import TABLES, Base
from tubedesk.db.session import build_engine, create_session_factory, session_scope

if TYPE_CHECKING:
    from tubedesk.config import Settings

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class StorageError(Exception):
    """A storage operation failed or matched an unexpected number of rows."""


class RecordNotFoundError(StorageError):
    """No row matched the filter of a single-row operation."""


def _row_to_dict(obj: Base) -> Row:
    """Convert a mapped object to a plain dict of column values."""
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


class StorageClient:
    """Handle to the relational store.

    One instance is built at startup and shared by every request. Each
    operation runs in its own short transaction; nothing spans calls.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> StorageClient:
        """Build a client from the configured URL and service credential."""
        engine = build_engine(
            settings.database_url,
            settings.database_service_key.get_secret_value(),
        )
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def close(self) -> None:
        """Dispose of pooled connections."""
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def select(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        """Fetch every row matching the equality filters.

        Args:
            table: Table name.
            filters: Column/value pairs that must all match.
            order_by: Optional column to sort by.
            descending: Sort direction for ``order_by``.

        Returns:
            Matching rows, possibly empty.

        Raises:
            StorageError: Unknown table/column or database failure.
        """
        model = self._model(table)
        with self._translate_errors(f"select from {table}"):
            with session_scope(self._session_factory) as session:
                query = self._filtered(session.query(model), model, filters)
                if order_by is not None:
                    column = self._column(model, order_by)
                    query = query.order_by(column.desc() if descending else column.asc())
                return [_row_to_dict(obj) for obj in query.all()]

    def select_one(self, table: str, filters: Mapping[str, Any]) -> Row:
        """Fetch exactly one row.

        Raises:
            RecordNotFoundError: No row matched.
            StorageError: More than one row matched, or database failure.
        """
        model = self._model(table)
        with self._translate_errors(f"select one from {table}"):
            with session_scope(self._session_factory) as session:
                obj = self._single(session, model, table, filters)
                return _row_to_dict(obj)

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert one row and return it as stored, defaults included.

        Raises:
            StorageError: Unknown column, constraint violation or
                connectivity failure.
        """
        model = self._model(table)
        for key in row:
            self._column(model, key)

        with self._translate_errors(f"insert into {table}"):
            with session_scope(self._session_factory) as session:
                obj = model(**row)
                session.add(obj)
                session.flush()
                session.refresh(obj)
                stored = _row_to_dict(obj)

        logger.debug(f"Inserted row into {table}: {stored.get('id')}")
        return stored

    def update(self, table: str, filters: Mapping[str, Any], patch: Mapping[str, Any]) -> Row:
        """Apply a patch to the single row matching the filters.

        Returns:
            The row after the update.

        Raises:
            RecordNotFoundError: No row matched.
            StorageError: More than one row matched, unknown column, or
                database failure.
        """
        model = self._model(table)
        for key in patch:
            self._column(model, key)

        with self._translate_errors(f"update {table}"):
            with session_scope(self._session_factory) as session:
                obj = self._single(session, model, table, filters)
                for key, value in patch.items():
                    setattr(obj, key, value)
                session.flush()
                session.refresh(obj)
                updated = _row_to_dict(obj)

        logger.debug(f"Updated {table} row {updated.get('id')}: {sorted(patch)}")
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _model(table: str) -> type[Base]:
        try:
            return TABLES[table]
        except KeyError:
            raise StorageError(f"Unknown table: {table}") from None

    @staticmethod
    def _column(model: type[Base], name: str):
        columns = model.__table__.columns
        if name not in columns:
            raise StorageError(f"Unknown column: {model.__tablename__}.{name}")
        return columns[name]

    def _filtered(self, query, model: type[Base], filters: Mapping[str, Any] | None):
        for key, value in (filters or {}).items():
            query = query.filter(self._column(model, key) == value)
        return query

    def _single(self, session, model: type[Base], table: str, filters: Mapping[str, Any]) -> Base:
        # Fetch two so "more than one" is detectable without counting.
        matches = self._filtered(session.query(model), model, filters).limit(2).all()
        if not matches:
            raise RecordNotFoundError(f"No row in {table} matches {dict(filters)}")
        if len(matches) > 1:
            raise StorageError(f"Multiple rows in {table} match {dict(filters)}")
        return matches[0]

    @staticmethod
    @contextmanager
    def _translate_errors(operation: str) -> Iterator[None]:
        """Re-raise SQLAlchemy errors as StorageError with the driver's message."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.warning(f"Storage failure during {operation}: {exc}")
            message = str(getattr(exc, "orig", None) or exc)
            raise StorageError(message) from exc


__all__ = ["StorageClient", "StorageError", "RecordNotFoundError", "Row"]

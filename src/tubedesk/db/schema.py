"""Database schema for tubedesk.

The ``videos`` table holds source metadata plus the transcript and
summary filled in later by the ingestion pipeline.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Video(Base):
    """A source video and its derived text.

    Note: youtube_id is indexed but not unique, matching the hosted schema.
    """

    __tablename__ = "videos"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    youtube_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    published_at: Mapped[str] = mapped_column(String(64), nullable=False)
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )


# Tables reachable through the storage client, keyed by table name.
TABLES: dict[str, type[Base]] = {
    Video.__tablename__: Video,
}

"""Domain models for tubedesk.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and used throughout
the application for clean separation from the database layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


# ============================================================================
# Video Domain
# ============================================================================


@dataclass
class VideoEntity:
    """Domain model for a stored video."""

    id: str
    youtube_id: str
    title: str
    published_at: str
    transcript: str | None
    summary: str | None
    created_at: datetime
    updated_at: datetime


@dataclass
class NewVideo:
    """Fields supplied when registering a video."""

    youtube_id: str
    title: str
    published_at: str


@dataclass
class VideoPatch:
    """Partial update of the derived text fields.

    Empty strings count as absent, so a field can be filled in but never
    cleared back to empty through a patch.
    """

    transcript: str | None = None
    summary: str | None = None

    def changes(self) -> dict[str, str]:
        """Return only the fields that carry a non-empty value."""
        changes: dict[str, str] = {}
        if self.transcript:
            changes["transcript"] = self.transcript
        if self.summary:
            changes["summary"] = self.summary
        return changes


# ============================================================================
# Channel Domain
# ============================================================================


@dataclass
class ChannelEntity:
    """Domain model for a monitored channel (not persisted)."""

    channel_id: str
    name: str | None = None

"""Pydantic models for the procedure API.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from tubedesk.models.domain import ChannelEntity, VideoEntity


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Inputs
# ============================================================================


class VideoGetInput(ApiModel):
    """Input for videos.get."""

    id: str


class VideoCreateInput(ApiModel):
    """Input for videos.create."""

    youtube_id: str
    title: str
    published_at: str


class VideoUpdateInput(ApiModel):
    """Input for videos.update. Omitted or empty fields are left unchanged."""

    id: str
    transcript: str | None = None
    summary: str | None = None


class ChannelAddInput(ApiModel):
    """Input for channels.add."""

    channel_id: str
    name: str | None = None


# ============================================================================
# Results
# ============================================================================


class HealthStatus(ApiModel):
    status: Literal["ok"] = "ok"
    timestamp: str


class Video(ApiModel):
    """A stored video as returned to clients."""

    id: str
    youtube_id: str
    title: str
    published_at: str
    transcript: str | None
    summary: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, entity: VideoEntity) -> "Video":
        return cls(
            id=entity.id,
            youtube_id=entity.youtube_id,
            title=entity.title,
            published_at=entity.published_at,
            transcript=entity.transcript,
            summary=entity.summary,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


class VideoListResult(ApiModel):
    videos: list[Video]


class VideoResult(ApiModel):
    video: Video


class VideoMutationResult(ApiModel):
    success: bool = True
    video: Video


class Channel(ApiModel):
    channel_id: str
    name: str | None = None

    @classmethod
    def from_entity(cls, entity: ChannelEntity) -> "Channel":
        return cls(channel_id=entity.channel_id, name=entity.name)


class ChannelListResult(ApiModel):
    channels: list[Channel]


class ChannelAddResult(ApiModel):
    success: bool = True
    channel_id: str

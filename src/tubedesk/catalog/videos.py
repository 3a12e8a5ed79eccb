"""Video catalog operations.

Domain logic is pure - database operations go through the storage client.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from tubedesk.db.client import Row, StorageClient
from tubedesk.models.domain import NewVideo, VideoEntity, VideoPatch

logger = logging.getLogger(__name__)

VIDEOS_TABLE = "videos"


def _as_utc(moment: datetime) -> datetime:
    # SQLite drops the offset on read; stored values are always UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _row_to_entity(row: Row) -> VideoEntity:
    """Convert a storage row to a domain entity with UTC timestamps."""
    return VideoEntity(
        id=row["id"],
        youtube_id=row["youtube_id"],
        title=row["title"],
        published_at=row["published_at"],
        transcript=row["transcript"],
        summary=row["summary"],
        created_at=_as_utc(row["created_at"]),
        updated_at=_as_utc(row["updated_at"]),
    )


def list_videos(storage: StorageClient) -> list[VideoEntity]:
    """All videos, newest first."""
    rows = storage.select(VIDEOS_TABLE, order_by="created_at", descending=True)
    return [_row_to_entity(row) for row in rows]


def get_video(storage: StorageClient, video_id: str) -> VideoEntity:
    """Fetch one video.

    Raises:
        RecordNotFoundError: If no video has this id.
    """
    return _row_to_entity(storage.select_one(VIDEOS_TABLE, {"id": video_id}))


def create_video(storage: StorageClient, new_video: NewVideo) -> VideoEntity:
    """Insert a video; transcript and summary start out empty.

    Args:
        storage: Storage client.
        new_video: Source metadata.

    Returns:
        The stored video with its generated id and timestamps.
    """
    row = storage.insert(
        VIDEOS_TABLE,
        {
            "youtube_id": new_video.youtube_id,
            "title": new_video.title,
            "published_at": new_video.published_at,
        },
    )
    video = _row_to_entity(row)
    logger.info(f"Created video {video.id} (youtube_id={video.youtube_id})")
    return video


def update_video(storage: StorageClient, video_id: str, patch: VideoPatch) -> VideoEntity:
    """Apply a transcript/summary patch.

    Only non-empty fields are written. A patch with nothing to write still
    requires the video to exist and returns it unchanged.

    Args:
        storage: Storage client.
        video_id: Video to update.
        patch: Fields to set.

    Returns:
        The video after the update.

    Raises:
        RecordNotFoundError: If no video has this id.
    """
    changes = patch.changes()
    if not changes:
        return get_video(storage, video_id)

    row = storage.update(VIDEOS_TABLE, {"id": video_id}, changes)
    logger.info(f"Updated video {video_id}: {', '.join(sorted(changes))}")
    return _row_to_entity(row)

"""Video procedures.

videos.list   - query, all videos newest first
videos.get    - query, one video by id
videos.create - mutation, register a video
videos.update - mutation, set transcript and/or summary
"""

from __future__ import annotations

from tubedesk.catalog import videos as catalog
from tubedesk.models.domain import NewVideo, VideoPatch
from tubedesk.models.types import (
    Video,
    VideoCreateInput,
    VideoGetInput,
    VideoListResult,
    VideoMutationResult,
    VideoResult,
    VideoUpdateInput,
)
from tubedesk.rpc.router import ProcedureContext, ProcedureRouter

router = ProcedureRouter()


@router.query("list")
def list_videos(ctx: ProcedureContext) -> VideoListResult:
    """List all videos, newest first."""
    videos = catalog.list_videos(ctx.storage)
    return VideoListResult(videos=[Video.from_entity(v) for v in videos])


@router.query("get", input=VideoGetInput)
def get_video(ctx: ProcedureContext, input: VideoGetInput) -> VideoResult:
    """Get a single video by id.

    Raises:
        RecordNotFoundError: Surfaces as NOT_FOUND.
    """
    video = catalog.get_video(ctx.storage, input.id)
    return VideoResult(video=Video.from_entity(video))


@router.mutation("create", input=VideoCreateInput)
def create_video(ctx: ProcedureContext, input: VideoCreateInput) -> VideoMutationResult:
    """Create a video entry."""
    video = catalog.create_video(
        ctx.storage,
        NewVideo(
            youtube_id=input.youtube_id,
            title=input.title,
            published_at=input.published_at,
        ),
    )
    return VideoMutationResult(video=Video.from_entity(video))


@router.mutation("update", input=VideoUpdateInput)
def update_video(ctx: ProcedureContext, input: VideoUpdateInput) -> VideoMutationResult:
    """Update a video's transcript and/or summary."""
    patch = VideoPatch(transcript=input.transcript, summary=input.summary)
    video = catalog.update_video(ctx.storage, input.id, patch)
    return VideoMutationResult(video=Video.from_entity(video))

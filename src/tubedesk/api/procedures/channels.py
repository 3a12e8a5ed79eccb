"""Channel procedures.

channels.list - query, monitored channels (always empty for now)
channels.add  - mutation, accept a channel without persisting it
"""

from __future__ import annotations

from tubedesk.catalog import channels as catalog
from tubedesk.models.domain import ChannelEntity
from tubedesk.models.types import Channel, ChannelAddInput, ChannelAddResult, ChannelListResult
from tubedesk.rpc.router import ProcedureContext, ProcedureRouter

router = ProcedureRouter()


@router.query("list")
def list_channels(ctx: ProcedureContext) -> ChannelListResult:
    """List monitored channels."""
    return ChannelListResult(channels=[Channel.from_entity(c) for c in catalog.list_channels()])


@router.mutation("add", input=ChannelAddInput)
def add_channel(ctx: ProcedureContext, input: ChannelAddInput) -> ChannelAddResult:
    """Add a channel to monitor."""
    channel = catalog.add_channel(ChannelEntity(channel_id=input.channel_id, name=input.name))
    return ChannelAddResult(channel_id=channel.channel_id)

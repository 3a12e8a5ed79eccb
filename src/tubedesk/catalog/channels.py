"""Channel operations.

Channels have no backing table yet; these are explicit no-ops that keep
the procedure contract stable for clients.
"""

from __future__ import annotations

import logging

from tubedesk.models.domain import ChannelEntity

logger = logging.getLogger(__name__)


def list_channels() -> list[ChannelEntity]:
    """Monitored channels. Always empty until channels are persisted."""
    return []


def add_channel(channel: ChannelEntity) -> ChannelEntity:
    """Accept a channel without storing it."""
    logger.info(f"Channel {channel.channel_id} accepted but not persisted")
    return channel

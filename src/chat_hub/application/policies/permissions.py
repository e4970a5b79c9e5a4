from __future__ import annotations

from chat_hub.application.dto.principal import Principal
from chat_hub.application.exceptions import ForbiddenError, NotFoundError
from chat_hub.application.repositories.channel import ChannelReader
from chat_hub.domain.entities.channel import Channel


async def get_channel_or_404(channel_id: int, channels: ChannelReader) -> Channel:
    channel = await channels.get_by_id(channel_id)
    if channel is None:
        raise NotFoundError("Channel not found")
    return channel


async def assert_channel_member(
    principal: Principal,
    channel: Channel,
    channels: ChannelReader,
) -> None:
    if not await channels.is_member(channel.id, principal.user_id):
        raise ForbiddenError("Not a member of this channel")


async def assert_channel_admin(
    user_id: int,
    channel_id: int,
    channels: ChannelReader,
    detail: str = "Channel admin access required",
) -> None:
    # Checked against the persisted admin list on every call; never cached.
    if not await channels.is_admin(channel_id, user_id):
        raise ForbiddenError(detail)

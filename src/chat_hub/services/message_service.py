from __future__ import annotations

import math
from datetime import datetime

from chat_hub.application.dto.channel import ChannelMessagePage
from chat_hub.application.dto.principal import Principal
from chat_hub.application.policies.permissions import (
    assert_channel_admin,
    assert_channel_member,
    get_channel_or_404,
)
from chat_hub.application.uow import UnitOfWork
from chat_hub.domain.entities.message import ChannelMessage, PeerMessage


async def send_peer_message(
    sender_id: int,
    receiver_id: int,
    content: str,
    created_at: datetime,
    uow: UnitOfWork,
) -> PeerMessage:
    msg = await uow.peer_messages_w.create(sender_id, receiver_id, content, created_at)
    await uow.commit()
    return msg


async def send_channel_message(
    sender_id: int,
    channel_id: int,
    content: str,
    created_at: datetime,
    uow: UnitOfWork,
) -> ChannelMessage:
    """Persist a channel post. Only current channel admins may post."""
    await assert_channel_admin(
        sender_id, channel_id, uow.channels, detail="Only channel admins can send messages",
    )
    msg = await uow.channel_messages_w.create(sender_id, channel_id, content, created_at)
    await uow.commit()
    return msg


async def list_peer_messages(
    principal: Principal,
    peer_id: int,
    limit: int,
    offset: int,
    uow: UnitOfWork,
) -> list[PeerMessage]:
    return await uow.peer_messages.list_between(
        principal.user_id, peer_id, limit=limit, offset=offset,
    )


async def list_channel_messages(
    channel_id: int,
    principal: Principal,
    page: int,
    page_size: int,
    uow: UnitOfWork,
) -> ChannelMessagePage:
    channel = await get_channel_or_404(channel_id, uow.channels)
    await assert_channel_member(principal, channel, uow.channels)

    page = max(page, 1)
    total = await uow.channel_messages.count(channel_id)
    messages = await uow.channel_messages.list_page(
        channel_id, limit=page_size, offset=(page - 1) * page_size,
    )
    return ChannelMessagePage(
        messages=messages,
        total=total,
        page=page,
        pages=math.ceil(total / page_size),
    )

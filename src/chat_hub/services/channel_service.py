from __future__ import annotations

from datetime import datetime, timezone

from chat_hub.application.dto.channel import ChannelMembership, CreateChannelDTO
from chat_hub.application.dto.principal import Principal
from chat_hub.application.exceptions import ConflictError, NotFoundError, ValidationError
from chat_hub.application.policies.permissions import assert_channel_admin, get_channel_or_404
from chat_hub.application.uow import UnitOfWork
from chat_hub.domain.entities.channel import Channel, ChannelAdmin, ChannelMember


async def create_channel(
    data: CreateChannelDTO,
    principal: Principal,
    uow: UnitOfWork,
) -> Channel:
    """Create a channel; the creator becomes its first member and admin.

    The channel row and both association rows are committed together.
    """
    name = data.name.strip()
    if not name:
        raise ValidationError("Channel name cannot be empty")

    now = datetime.now(timezone.utc)
    channel = await uow.channels_w.create(name, data.description, now)
    await uow.channels_w.add_member(channel.id, principal.user_id, now)
    await uow.channels_w.add_admin(channel.id, principal.user_id, now)
    await uow.commit()
    return channel


async def list_channels(uow: UnitOfWork) -> list[Channel]:
    return await uow.channels.list_all()


async def get_channel(channel_id: int, uow: UnitOfWork) -> Channel:
    return await get_channel_or_404(channel_id, uow.channels)


async def join_channel(
    channel_id: int,
    principal: Principal,
    uow: UnitOfWork,
) -> ChannelMembership:
    channel = await get_channel_or_404(channel_id, uow.channels)
    if await uow.channels.is_member(channel_id, principal.user_id):
        return ChannelMembership(channel=channel, joined=False)

    await uow.channels_w.add_member(channel_id, principal.user_id, datetime.now(timezone.utc))
    await uow.commit()
    return ChannelMembership(channel=channel, joined=True)


async def list_members(channel_id: int, uow: UnitOfWork) -> list[ChannelMember]:
    await get_channel_or_404(channel_id, uow.channels)
    return await uow.channels.list_members(channel_id)


async def list_admins(channel_id: int, uow: UnitOfWork) -> list[ChannelAdmin]:
    await get_channel_or_404(channel_id, uow.channels)
    return await uow.channels.list_admins(channel_id)


async def add_admin(
    channel_id: int,
    user_id: int,
    principal: Principal,
    uow: UnitOfWork,
) -> list[ChannelAdmin]:
    """Grant admin rights. A user who is not yet a member is added as one."""
    await get_channel_or_404(channel_id, uow.channels)
    await assert_channel_admin(principal.user_id, channel_id, uow.channels)

    if await uow.channels.is_admin(channel_id, user_id):
        raise ConflictError("User is already an admin")

    now = datetime.now(timezone.utc)
    if not await uow.channels.is_member(channel_id, user_id):
        await uow.channels_w.add_member(channel_id, user_id, now)
    # A concurrent grant can land between the check above and this insert.
    if not await uow.channels_w.add_admin(channel_id, user_id, now):
        await uow.rollback()
        raise ConflictError("User is already an admin")
    await uow.commit()
    return await uow.channels.list_admins(channel_id)


async def remove_admin(
    channel_id: int,
    user_id: int,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    await get_channel_or_404(channel_id, uow.channels)
    await assert_channel_admin(principal.user_id, channel_id, uow.channels)

    removed = await uow.channels_w.remove_admin(channel_id, user_id)
    if not removed:
        raise NotFoundError("User is not an admin")
    await uow.commit()

from __future__ import annotations

from chat_hub.domain.entities.channel import Channel, ChannelAdmin, ChannelMember
from chat_hub.infrastructure.db.models.channel import (
    ChannelAdminModel,
    ChannelMemberModel,
    ChannelModel,
)


def model_to_entity(model: ChannelModel) -> Channel:
    return Channel(
        id=model.id,
        name=model.name,
        description=model.description,
        created_at=model.created_at,
    )


def member_to_entity(model: ChannelMemberModel) -> ChannelMember:
    return ChannelMember(
        channel_id=model.channel_id,
        user_id=model.user_id,
        joined_at=model.joined_at,
    )


def admin_to_entity(model: ChannelAdminModel) -> ChannelAdmin:
    return ChannelAdmin(
        channel_id=model.channel_id,
        user_id=model.user_id,
        added_at=model.added_at,
    )

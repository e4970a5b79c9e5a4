from __future__ import annotations

from chat_hub.domain.entities.message import ChannelMessage, PeerMessage
from chat_hub.infrastructure.db.models.message import ChannelMessageModel, PeerMessageModel


def peer_to_entity(model: PeerMessageModel) -> PeerMessage:
    return PeerMessage(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        content=model.content,
        created_at=model.created_at,
    )


def channel_to_entity(model: ChannelMessageModel) -> ChannelMessage:
    return ChannelMessage(
        id=model.id,
        sender_id=model.sender_id,
        channel_id=model.channel_id,
        content=model.content,
        created_at=model.created_at,
    )

"""WebSocket message envelope models."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from chat_hub.domain.entities.message import ChannelMessage, PeerMessage
from chat_hub.domain.value_objects.enums import FrameType


class PeerMessageIn(BaseModel):
    receiver_id: int = 0
    content: str = ""


class ChannelMessageIn(BaseModel):
    channel_id: int = 0
    content: str = ""


class WsInbound(BaseModel):
    """Client → Server.

    Sender and creation time are never taken from the client; any such
    fields in the payload are ignored.
    """

    type: str  # peer | channel
    peer_message: PeerMessageIn | None = None
    channel_message: ChannelMessageIn | None = None


class PeerMessageOut(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    created_at: datetime


class ChannelMessageOut(BaseModel):
    id: int
    sender_id: int
    channel_id: int
    content: str
    created_at: datetime


class ErrorOut(BaseModel):
    code: str
    detail: str


class WsOutbound(BaseModel):
    """Server → Client."""

    type: FrameType
    peer_message: PeerMessageOut | None = None
    channel_message: ChannelMessageOut | None = None
    error: ErrorOut | None = None

    def to_frame(self) -> str:
        return self.model_dump_json(exclude_none=True)


def peer_frame(message: PeerMessage) -> str:
    return WsOutbound(
        type=FrameType.PEER,
        peer_message=PeerMessageOut.model_validate(message, from_attributes=True),
    ).to_frame()


def channel_frame(message: ChannelMessage) -> str:
    return WsOutbound(
        type=FrameType.CHANNEL,
        channel_message=ChannelMessageOut.model_validate(message, from_attributes=True),
    ).to_frame()


def error_frame(code: str, detail: str) -> str:
    return WsOutbound(type=FrameType.ERROR, error=ErrorOut(code=code, detail=detail)).to_frame()


def control_frame(frame_type: FrameType) -> str:
    return WsOutbound(type=frame_type).to_frame()

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class PeerMessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ChannelMessageResponse(BaseModel):
    id: int
    sender_id: int
    channel_id: int
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ChannelMessagePageResponse(BaseModel):
    messages: list[ChannelMessageResponse]
    total: int
    page: int
    pages: int

    model_config = {"from_attributes": True}

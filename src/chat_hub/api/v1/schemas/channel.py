from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CreateChannelRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class AddAdminRequest(BaseModel):
    user_id: int = Field(gt=0)


class ChannelResponse(BaseModel):
    id: int
    name: str
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class JoinChannelResponse(BaseModel):
    channel: ChannelResponse
    joined: bool

    model_config = {"from_attributes": True}


class ChannelMemberResponse(BaseModel):
    user_id: int
    joined_at: datetime

    model_config = {"from_attributes": True}


class ChannelAdminResponse(BaseModel):
    user_id: int
    added_at: datetime

    model_config = {"from_attributes": True}

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Channel:
    id: int
    name: str
    description: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ChannelMember:
    channel_id: int
    user_id: int
    joined_at: datetime


@dataclass(frozen=True, slots=True)
class ChannelAdmin:
    channel_id: int
    user_id: int
    added_at: datetime

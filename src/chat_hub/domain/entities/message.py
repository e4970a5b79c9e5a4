from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class PeerMessage:
    id: int
    sender_id: int
    receiver_id: int
    content: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ChannelMessage:
    id: int
    sender_id: int
    channel_id: int
    content: str
    created_at: datetime

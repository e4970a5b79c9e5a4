from __future__ import annotations

from dataclasses import dataclass

from chat_hub.domain.entities.channel import Channel
from chat_hub.domain.entities.message import ChannelMessage


@dataclass(frozen=True, slots=True)
class CreateChannelDTO:
    name: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ChannelMessagePage:
    messages: list[ChannelMessage]
    total: int
    page: int
    pages: int


@dataclass(frozen=True, slots=True)
class ChannelMembership:
    """Result of a create/join: the channel and whether membership changed."""

    channel: Channel
    joined: bool

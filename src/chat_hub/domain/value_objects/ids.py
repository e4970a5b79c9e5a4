from __future__ import annotations

from typing import NewType

UserId = NewType("UserId", int)
ChannelId = NewType("ChannelId", int)

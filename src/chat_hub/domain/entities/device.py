from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Device:
    """A push destination registered by a user."""

    id: int
    user_id: int
    token: str
    platform: str | None
    created_at: datetime

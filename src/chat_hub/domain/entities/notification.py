from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class NotificationRecord:
    """Write-once log entry for one push notification attempt."""

    id: int
    user_id: int
    title: str
    body: str
    payload: dict[str, Any] | None
    status: str
    sent_at: datetime

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class PushMessage:
    token: str
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PushTicket:
    """Per-token outcome reported by a push provider."""

    token: str
    ok: bool
    error: str | None = None
    invalid_token: bool = False

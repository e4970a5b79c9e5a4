from __future__ import annotations

from enum import StrEnum


class EnvelopeType(StrEnum):
    PEER = "peer"
    CHANNEL = "channel"


class FrameType(StrEnum):
    PEER = "peer"
    CHANNEL = "channel"
    CONNECTION_ESTABLISHED = "connection_established"
    HEARTBEAT = "heartbeat"
    ERROR = "error"


class NotificationStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"

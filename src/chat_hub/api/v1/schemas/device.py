from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class RegisterDeviceRequest(BaseModel):
    token: str = Field(min_length=1, max_length=255)
    platform: Literal["ios", "android", "web"] | None = None


class DeviceResponse(BaseModel):
    id: int
    token: str
    platform: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationResponse(BaseModel):
    id: int
    title: str
    body: str
    payload: dict[str, Any] | None
    status: str
    sent_at: datetime

    model_config = {"from_attributes": True}

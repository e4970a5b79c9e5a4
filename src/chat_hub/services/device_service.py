from __future__ import annotations

from datetime import datetime, timezone

from chat_hub.application.dto.principal import Principal
from chat_hub.application.exceptions import NotFoundError, ValidationError
from chat_hub.application.uow import UnitOfWork
from chat_hub.domain.entities.device import Device
from chat_hub.domain.entities.notification import NotificationRecord


async def register_device(
    principal: Principal,
    token: str,
    platform: str | None,
    uow: UnitOfWork,
) -> Device:
    token = token.strip()
    if not token:
        raise ValidationError("Device token cannot be empty")
    device = await uow.devices_w.upsert(
        principal.user_id, token, platform, datetime.now(timezone.utc),
    )
    await uow.commit()
    return device


async def unregister_device(principal: Principal, token: str, uow: UnitOfWork) -> None:
    removed = await uow.devices_w.delete_for_user(principal.user_id, token)
    if not removed:
        raise NotFoundError("Device not found")
    await uow.commit()


async def list_notifications(
    principal: Principal,
    limit: int,
    uow: UnitOfWork,
) -> list[NotificationRecord]:
    return await uow.notifications.list_for_user(principal.user_id, limit=limit)

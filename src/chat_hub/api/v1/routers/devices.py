from __future__ import annotations

from fastapi import APIRouter, Query, status

from chat_hub.api.deps import CurrentPrincipal, UoWDep
from chat_hub.api.v1.schemas.device import (
    DeviceResponse,
    NotificationResponse,
    RegisterDeviceRequest,
)
from chat_hub.services import device_service

router = APIRouter(prefix="/api/v1/chat", tags=["devices"])


@router.post("/devices", response_model=DeviceResponse, status_code=status.HTTP_201_CREATED)
async def register_device(
    body: RegisterDeviceRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> DeviceResponse:
    device = await device_service.register_device(principal, body.token, body.platform, uow)
    return DeviceResponse.model_validate(device, from_attributes=True)


@router.delete("/devices/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def unregister_device(
    token: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await device_service.unregister_device(principal, token, uow)


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(50, ge=1, le=200),
) -> list[NotificationResponse]:
    records = await device_service.list_notifications(principal, limit, uow)
    return [NotificationResponse.model_validate(r, from_attributes=True) for r in records]

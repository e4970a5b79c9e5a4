from __future__ import annotations

from chat_hub.domain.entities.device import Device
from chat_hub.infrastructure.db.models.device import DeviceModel


def model_to_entity(model: DeviceModel) -> Device:
    return Device(
        id=model.id,
        user_id=model.user_id,
        token=model.token,
        platform=model.platform,
        created_at=model.created_at,
    )

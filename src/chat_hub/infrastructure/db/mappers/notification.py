from __future__ import annotations

from chat_hub.domain.entities.notification import NotificationRecord
from chat_hub.infrastructure.db.models.notification import NotificationHistoryModel


def model_to_entity(model: NotificationHistoryModel) -> NotificationRecord:
    return NotificationRecord(
        id=model.id,
        user_id=model.user_id,
        title=model.title,
        body=model.body,
        payload=model.payload,
        status=model.status,
        sent_at=model.sent_at,
    )

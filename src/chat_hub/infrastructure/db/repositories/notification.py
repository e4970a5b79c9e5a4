from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_hub.domain.entities.notification import NotificationRecord
from chat_hub.infrastructure.db.mappers import notification as mapper
from chat_hub.infrastructure.db.models.notification import NotificationHistoryModel


class NotificationHistoryReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(self, user_id: int, *, limit: int = 50) -> list[NotificationRecord]:
        stmt = (
            select(NotificationHistoryModel)
            .where(NotificationHistoryModel.user_id == user_id)
            .order_by(NotificationHistoryModel.sent_at.desc(), NotificationHistoryModel.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class NotificationHistoryWriterRepo:
    """Append-only: history rows are never updated."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        user_id: int,
        title: str,
        body: str,
        payload: dict[str, Any] | None,
        status: str,
        sent_at: datetime,
    ) -> NotificationRecord:
        model = NotificationHistoryModel(
            user_id=user_id,
            title=title,
            body=body,
            payload=payload,
            status=status,
            sent_at=sent_at,
        )
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

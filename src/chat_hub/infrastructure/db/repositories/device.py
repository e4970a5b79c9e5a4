from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chat_hub.domain.entities.device import Device
from chat_hub.infrastructure.db.mappers import device as mapper
from chat_hub.infrastructure.db.models.device import DeviceModel


class DeviceReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(self, user_id: int) -> list[Device]:
        stmt = select(DeviceModel).where(DeviceModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class DeviceWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(
        self, user_id: int, token: str, platform: str | None, created_at: datetime,
    ) -> Device:
        stmt = (
            pg_insert(DeviceModel)
            .values(user_id=user_id, token=token, platform=platform, created_at=created_at)
            .on_conflict_do_update(
                index_elements=["token"],
                set_={"user_id": user_id, "platform": platform},
            )
            .returning(DeviceModel)
        )
        result = await self._session.execute(stmt)
        return mapper.model_to_entity(result.scalar_one())

    async def delete_for_user(self, user_id: int, token: str) -> bool:
        stmt = delete(DeviceModel).where(
            DeviceModel.user_id == user_id,
            DeviceModel.token == token,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete_tokens(self, tokens: list[str]) -> int:
        if not tokens:
            return 0
        stmt = delete(DeviceModel).where(DeviceModel.token.in_(tokens))
        result = await self._session.execute(stmt)
        return result.rowcount

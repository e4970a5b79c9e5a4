from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chat_hub.domain.entities.channel import Channel, ChannelAdmin, ChannelMember
from chat_hub.infrastructure.db.mappers import channel as mapper
from chat_hub.infrastructure.db.models.channel import (
    ChannelAdminModel,
    ChannelMemberModel,
    ChannelModel,
)


class ChannelReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, channel_id: int) -> Channel | None:
        model = await self._session.get(ChannelModel, channel_id)
        return mapper.model_to_entity(model) if model else None

    async def list_all(self) -> list[Channel]:
        stmt = select(ChannelModel).order_by(ChannelModel.id.asc())
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_member(self, user_id: int) -> list[Channel]:
        stmt = (
            select(ChannelModel)
            .join(ChannelMemberModel, ChannelMemberModel.channel_id == ChannelModel.id)
            .where(ChannelMemberModel.user_id == user_id)
            .order_by(ChannelModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def is_member(self, channel_id: int, user_id: int) -> bool:
        stmt = (
            select(ChannelMemberModel.user_id)
            .where(
                ChannelMemberModel.channel_id == channel_id,
                ChannelMemberModel.user_id == user_id,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def is_admin(self, channel_id: int, user_id: int) -> bool:
        stmt = (
            select(ChannelAdminModel.user_id)
            .where(
                ChannelAdminModel.channel_id == channel_id,
                ChannelAdminModel.user_id == user_id,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_members(self, channel_id: int) -> list[ChannelMember]:
        stmt = (
            select(ChannelMemberModel)
            .where(ChannelMemberModel.channel_id == channel_id)
            .order_by(ChannelMemberModel.joined_at.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.member_to_entity(m) for m in result.scalars().all()]

    async def list_admins(self, channel_id: int) -> list[ChannelAdmin]:
        stmt = (
            select(ChannelAdminModel)
            .where(ChannelAdminModel.channel_id == channel_id)
            .order_by(ChannelAdminModel.added_at.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.admin_to_entity(m) for m in result.scalars().all()]


class ChannelWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, name: str, description: str | None, created_at: datetime,
    ) -> Channel:
        model = ChannelModel(name=name, description=description, created_at=created_at)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def add_member(self, channel_id: int, user_id: int, joined_at: datetime) -> None:
        stmt = (
            pg_insert(ChannelMemberModel)
            .values(channel_id=channel_id, user_id=user_id, joined_at=joined_at)
            .on_conflict_do_nothing(index_elements=["channel_id", "user_id"])
        )
        await self._session.execute(stmt)

    async def add_admin(self, channel_id: int, user_id: int, added_at: datetime) -> bool:
        stmt = (
            pg_insert(ChannelAdminModel)
            .values(channel_id=channel_id, user_id=user_id, added_at=added_at)
            .on_conflict_do_nothing(index_elements=["channel_id", "user_id"])
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def remove_admin(self, channel_id: int, user_id: int) -> bool:
        stmt = delete(ChannelAdminModel).where(
            ChannelAdminModel.channel_id == channel_id,
            ChannelAdminModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

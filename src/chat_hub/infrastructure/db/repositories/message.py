from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_hub.domain.entities.message import ChannelMessage, PeerMessage
from chat_hub.infrastructure.db.mappers import message as mapper
from chat_hub.infrastructure.db.models.message import ChannelMessageModel, PeerMessageModel


class PeerMessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_between(
        self,
        user_id: int,
        peer_id: int,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PeerMessage]:
        stmt = (
            select(PeerMessageModel)
            .where(
                or_(
                    and_(PeerMessageModel.sender_id == user_id, PeerMessageModel.receiver_id == peer_id),
                    and_(PeerMessageModel.sender_id == peer_id, PeerMessageModel.receiver_id == user_id),
                )
            )
            .order_by(PeerMessageModel.created_at.asc(), PeerMessageModel.id.asc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [mapper.peer_to_entity(m) for m in result.scalars().all()]


class PeerMessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, sender_id: int, receiver_id: int, content: str, created_at: datetime,
    ) -> PeerMessage:
        model = PeerMessageModel(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            created_at=created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return mapper.peer_to_entity(model)


class ChannelMessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_page(
        self, channel_id: int, *, limit: int, offset: int,
    ) -> list[ChannelMessage]:
        stmt = (
            select(ChannelMessageModel)
            .where(ChannelMessageModel.channel_id == channel_id)
            .order_by(ChannelMessageModel.created_at.desc(), ChannelMessageModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [mapper.channel_to_entity(m) for m in result.scalars().all()]

    async def count(self, channel_id: int) -> int:
        stmt = select(func.count()).select_from(ChannelMessageModel).where(
            ChannelMessageModel.channel_id == channel_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()


class ChannelMessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, sender_id: int, channel_id: int, content: str, created_at: datetime,
    ) -> ChannelMessage:
        model = ChannelMessageModel(
            sender_id=sender_id,
            channel_id=channel_id,
            content=content,
            created_at=created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return mapper.channel_to_entity(model)

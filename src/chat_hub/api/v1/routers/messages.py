from __future__ import annotations

from fastapi import APIRouter, Query

from chat_hub.api.deps import CurrentPrincipal, UoWDep
from chat_hub.api.v1.schemas.message import PeerMessageResponse
from chat_hub.services import message_service

router = APIRouter(prefix="/api/v1/chat/messages", tags=["messages"])


@router.get("/peer/{peer_id}", response_model=list[PeerMessageResponse])
async def list_peer_messages(
    peer_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[PeerMessageResponse]:
    messages = await message_service.list_peer_messages(
        principal, peer_id, limit, offset, uow,
    )
    return [PeerMessageResponse.model_validate(m, from_attributes=True) for m in messages]

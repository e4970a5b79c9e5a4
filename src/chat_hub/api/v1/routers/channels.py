from __future__ import annotations

from fastapi import APIRouter, Query, status

from chat_hub.api.deps import CurrentPrincipal, HubDep, UoWDep
from chat_hub.api.v1.schemas.channel import (
    AddAdminRequest,
    ChannelAdminResponse,
    ChannelMemberResponse,
    ChannelResponse,
    CreateChannelRequest,
    JoinChannelResponse,
)
from chat_hub.api.v1.schemas.message import ChannelMessagePageResponse
from chat_hub.application.dto.channel import CreateChannelDTO
from chat_hub.config import settings
from chat_hub.services import channel_service, message_service

router = APIRouter(prefix="/api/v1/chat/channels", tags=["channels"])


@router.post("", response_model=ChannelResponse, status_code=status.HTTP_201_CREATED)
async def create_channel(
    body: CreateChannelRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
) -> ChannelResponse:
    channel = await channel_service.create_channel(
        CreateChannelDTO(name=body.name, description=body.description), principal, uow,
    )
    hub.subscribe_user(channel.id, principal.user_id)
    return ChannelResponse.model_validate(channel, from_attributes=True)


@router.get("", response_model=list[ChannelResponse])
async def list_channels(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ChannelResponse]:
    channels = await channel_service.list_channels(uow)
    return [ChannelResponse.model_validate(c, from_attributes=True) for c in channels]


@router.get("/{channel_id}", response_model=ChannelResponse)
async def get_channel(
    channel_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ChannelResponse:
    channel = await channel_service.get_channel(channel_id, uow)
    return ChannelResponse.model_validate(channel, from_attributes=True)


@router.post("/{channel_id}/join", response_model=JoinChannelResponse)
async def join_channel(
    channel_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
) -> JoinChannelResponse:
    membership = await channel_service.join_channel(channel_id, principal, uow)
    hub.subscribe_user(channel_id, principal.user_id)
    return JoinChannelResponse.model_validate(membership, from_attributes=True)


@router.get("/{channel_id}/members", response_model=list[ChannelMemberResponse])
async def list_members(
    channel_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ChannelMemberResponse]:
    members = await channel_service.list_members(channel_id, uow)
    return [ChannelMemberResponse.model_validate(m, from_attributes=True) for m in members]


@router.get("/{channel_id}/admins", response_model=list[ChannelAdminResponse])
async def list_admins(
    channel_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ChannelAdminResponse]:
    admins = await channel_service.list_admins(channel_id, uow)
    return [ChannelAdminResponse.model_validate(a, from_attributes=True) for a in admins]


@router.post("/{channel_id}/admins", response_model=list[ChannelAdminResponse])
async def add_admin(
    channel_id: int,
    body: AddAdminRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    hub: HubDep,
) -> list[ChannelAdminResponse]:
    admins = await channel_service.add_admin(channel_id, body.user_id, principal, uow)
    # The new admin may have become a member just now.
    hub.subscribe_user(channel_id, body.user_id)
    return [ChannelAdminResponse.model_validate(a, from_attributes=True) for a in admins]


@router.delete("/{channel_id}/admins/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_admin(
    channel_id: int,
    user_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await channel_service.remove_admin(channel_id, user_id, principal, uow)


@router.get("/{channel_id}/messages", response_model=ChannelMessagePageResponse)
async def list_channel_messages(
    channel_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
    page: int = Query(1, ge=1),
) -> ChannelMessagePageResponse:
    result = await message_service.list_channel_messages(
        channel_id, principal, page, settings.CHANNEL_MESSAGES_PAGE_SIZE, uow,
    )
    return ChannelMessagePageResponse.model_validate(result, from_attributes=True)

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status

from messaging_service.api.deps import CurrentPrincipal, PublisherDep, UoWDep
from messaging_service.api.v1.schemas.common import StatusResponse
from messaging_service.api.v1.schemas.conversation import (
    ConversationActionRequest,
    ConversationEnvelope,
    ConversationListEnvelope,
    ConversationResponse,
    ConversationSummaryResponse,
    CreateConversationRequest,
)
from messaging_service.application.dto.conversation import CreateConversationDTO
from messaging_service.services import conversation_service, read_state_service

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("", response_model=ConversationListEnvelope)
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationListEnvelope:
    views = await conversation_service.list_conversations(principal, uow)
    return ConversationListEnvelope(
        conversations=[ConversationSummaryResponse.from_summary(v) for v in views],
    )


@router.post("", response_model=ConversationEnvelope, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    body: CreateConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    response: Response,
) -> ConversationEnvelope:
    view, created = await conversation_service.create_conversation(
        principal,
        CreateConversationDTO(
            participant_id=body.participant_id or "",
            type=body.type,
            title=body.title,
            description=body.description,
            participant_ids=tuple(body.participant_ids),
        ),
        uow,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return ConversationEnvelope(conversation=ConversationResponse.from_view(view))


@router.get("/{conversation_id}", response_model=ConversationEnvelope)
async def get_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationEnvelope:
    view = await conversation_service.get_conversation(conversation_id, principal, uow)
    return ConversationEnvelope(conversation=ConversationResponse.from_view(view))


@router.patch("/{conversation_id}", response_model=StatusResponse)
async def patch_conversation(
    conversation_id: UUID,
    body: ConversationActionRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> StatusResponse:
    await read_state_service.apply_conversation_action(
        conversation_id, principal, body.action, uow, publisher,
    )
    return StatusResponse(message="All messages marked as read")

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from messaging_service.api.deps import CurrentPrincipal, PublisherDep, UoWDep
from messaging_service.api.responses import error_response
from messaging_service.api.v1.schemas.message import (
    MessageActionRequest,
    MessageEnvelope,
    MessageListEnvelope,
    MessageResponse,
    MessageResultEnvelope,
    SendDirectMessageRequest,
    SendMessageRequest,
)
from messaging_service.application.dto.message import (
    PostMessageDTO,
    ValidationFailure,
    validate_post_message,
)
from messaging_service.config import settings
from messaging_service.domain.value_objects.enums import MessageAction
from messaging_service.services import message_service

router = APIRouter(tags=["messages"])

_ACTION_MESSAGES = {
    MessageAction.MARK_READ: "Message marked as read",
    MessageAction.DELETE: "Message deleted",
}


def _validate(body: SendMessageRequest) -> PostMessageDTO | ValidationFailure:
    return validate_post_message(
        body.content,
        message_type=body.message_type,
        attachment_url=body.attachment_url,
        attachment_type=body.attachment_type,
        file_name=body.file_name,
        reply_to_id=body.reply_to_id,
    )


@router.get("/conversations/{conversation_id}/messages", response_model=MessageListEnvelope)
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.MESSAGES_PAGE_DEFAULT, ge=1),
) -> MessageListEnvelope:
    result = await message_service.list_messages(
        conversation_id,
        principal,
        page,
        limit,
        uow,
        max_limit=settings.MESSAGES_PAGE_MAX,
    )
    return MessageListEnvelope.from_page(result)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageEnvelope | JSONResponse:
    data = _validate(body)
    if isinstance(data, ValidationFailure):
        return error_response(status.HTTP_400_BAD_REQUEST, data.detail)

    view = await message_service.post_message(
        conversation_id, principal, data, uow, publisher,
    )
    return MessageEnvelope(message=MessageResponse.from_view(view))


@router.patch("/messages/{message_id}", response_model=MessageResultEnvelope)
async def update_message(
    message_id: UUID,
    body: MessageActionRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResultEnvelope:
    view = await message_service.update_message(
        message_id, principal, body.action, uow, publisher,
    )
    return MessageResultEnvelope(
        message=_ACTION_MESSAGES[MessageAction(body.action)],
        data=MessageResponse.from_view(view),
    )


@router.get("/messages", response_model=MessageListEnvelope)
async def list_messages_by_query(
    principal: CurrentPrincipal,
    uow: UoWDep,
    conversation_id: UUID = Query(..., alias="conversationId"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.MESSAGES_PAGE_DEFAULT, ge=1),
) -> MessageListEnvelope:
    """Same listing as the nested route, addressed by query parameter."""
    result = await message_service.list_messages(
        conversation_id,
        principal,
        page,
        limit,
        uow,
        max_limit=settings.MESSAGES_PAGE_MAX,
    )
    return MessageListEnvelope.from_page(result)


@router.post(
    "/messages",
    response_model=MessageResultEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def send_to_user(
    body: SendDirectMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: PublisherDep,
) -> MessageResultEnvelope | JSONResponse:
    data = _validate(body)
    if isinstance(data, ValidationFailure):
        return error_response(status.HTTP_400_BAD_REQUEST, data.detail)

    view = await message_service.send_to_user(
        principal, body.receiver_id, data, uow, publisher,
    )
    return MessageResultEnvelope(message="Message sent", data=MessageResponse.from_view(view))

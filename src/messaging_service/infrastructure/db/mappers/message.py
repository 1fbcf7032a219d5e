from __future__ import annotations

from messaging_service.domain.entities.message import Message
from messaging_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        content=model.content,
        message_type=model.message_type,
        attachment_url=model.attachment_url,
        attachment_type=model.attachment_type,
        file_name=model.file_name,
        reply_to_id=model.reply_to_id,
        is_delivered=model.is_delivered,
        delivered_at=model.delivered_at,
        is_read=model.is_read,
        read_at=model.read_at,
        is_deleted=model.is_deleted,
        deleted_at=model.deleted_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        content=entity.content,
        message_type=entity.message_type,
        attachment_url=entity.attachment_url,
        attachment_type=entity.attachment_type,
        file_name=entity.file_name,
        reply_to_id=entity.reply_to_id,
        is_delivered=entity.is_delivered,
        delivered_at=entity.delivered_at,
        is_read=entity.is_read,
        read_at=entity.read_at,
        is_deleted=entity.is_deleted,
        deleted_at=entity.deleted_at,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )

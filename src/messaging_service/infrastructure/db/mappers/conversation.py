from __future__ import annotations

from messaging_service.domain.entities.conversation import Conversation
from messaging_service.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        type=model.type,
        title=model.title,
        description=model.description,
        image_url=model.image_url,
        is_active=model.is_active,
        direct_key=model.direct_key,
        last_message_id=model.last_message_id,
        last_message_content=model.last_message_content,
        last_message_at=model.last_message_at,
        last_message_sender=model.last_message_sender,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: Conversation) -> dict:
    return {
        "id": entity.id,
        "type": entity.type,
        "title": entity.title,
        "description": entity.description,
        "image_url": entity.image_url,
        "is_active": entity.is_active,
        "direct_key": entity.direct_key,
        "last_message_id": entity.last_message_id,
        "last_message_content": entity.last_message_content,
        "last_message_at": entity.last_message_at,
        "last_message_sender": entity.last_message_sender,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(**entity_to_values(entity))

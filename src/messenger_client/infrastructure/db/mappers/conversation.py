from __future__ import annotations

from typing import Iterable
from uuid import UUID

from messenger_client.domain.entities.conversation import Conversation, NewConversation
from messenger_client.domain.value_objects.enums import ConversationType
from messenger_client.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(
    model: ConversationModel,
    participant_ids: Iterable[UUID] | None = None,
) -> Conversation:
    if participant_ids is None:
        participant_ids = (p.user_id for p in model.participants)
    return Conversation(
        id=model.id,
        type=ConversationType(model.type),
        participants=frozenset(participant_ids),
        name=model.name,
        avatar=model.avatar,
        messages=[],
    )


def new_to_model(row: NewConversation) -> ConversationModel:
    return ConversationModel(
        type=row.type.value,
        name=row.name,
        avatar=row.avatar,
    )

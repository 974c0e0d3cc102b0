from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger_client.domain.entities.conversation import (
    Conversation,
    NewConversation,
    ParticipantRow,
)
from messenger_client.domain.value_objects.enums import ConversationType
from messenger_client.infrastructure.db.mappers import conversation as mapper
from messenger_client.infrastructure.db.models.conversation import ConversationModel
from messenger_client.infrastructure.db.models.participant import ParticipantModel


class ConversationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(self, user_id: UUID) -> list[Conversation]:
        member_of = select(ParticipantModel.conversation_id).where(
            ParticipantModel.user_id == user_id,
        )
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.id.in_(member_of))
            .order_by(ConversationModel.created_at, ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def find_private(self, user_a: UUID, user_b: UUID) -> UUID | None:
        """Private conversation whose participant set is exactly {user_a, user_b}."""
        pair = {user_a, user_b}
        stmt = (
            select(ParticipantModel.conversation_id)
            .join(ConversationModel, ConversationModel.id == ParticipantModel.conversation_id)
            .where(ConversationModel.type == ConversationType.PRIVATE.value)
            .group_by(ParticipantModel.conversation_id)
            .having(func.count() == len(pair))
            .having(
                func.count().filter(ParticipantModel.user_id.in_(pair)) == len(pair)
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, row: NewConversation) -> Conversation:
        model = mapper.new_to_model(row)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model, participant_ids=())

    async def add_participants(self, rows: list[ParticipantRow]) -> None:
        self._session.add_all(
            ParticipantModel(conversation_id=r.conversation_id, user_id=r.user_id)
            for r in rows
        )
        await self._session.flush()

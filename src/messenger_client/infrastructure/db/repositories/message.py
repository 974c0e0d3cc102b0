from __future__ import annotations

from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger_client.domain.entities.message import Message, NewMessage
from messenger_client.infrastructure.db.mappers import message as mapper
from messenger_client.infrastructure.db.models.message import MessageModel


class MessageRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_conversations(self, conversation_ids: Iterable[UUID]) -> list[Message]:
        ids = list(conversation_ids)
        if not ids:
            return []
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id.in_(ids))
            .order_by(MessageModel.timestamp.asc(), MessageModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def create(self, row: NewMessage) -> Message:
        model = mapper.new_to_model(row)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return mapper.model_to_entity(model)

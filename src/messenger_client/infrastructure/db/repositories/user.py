from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger_client.domain.entities.user import NewUser, User
from messenger_client.infrastructure.db.mappers import user as mapper
from messenger_client.infrastructure.db.models.user import UserModel


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[User]:
        result = await self._session.execute(select(UserModel).order_by(UserModel.name))
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def get_by_phone(self, phone_number: str) -> User | None:
        stmt = select(UserModel).where(UserModel.phone_number == phone_number)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def create(self, row: NewUser) -> User:
        model = mapper.new_to_model(row)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

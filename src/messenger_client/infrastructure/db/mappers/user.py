from __future__ import annotations

from messenger_client.domain.entities.user import NewUser, User
from messenger_client.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        name=model.name,
        avatar=model.avatar,
        phone_number=model.phone_number,
    )


def new_to_model(row: NewUser) -> UserModel:
    return UserModel(
        name=row.name,
        phone_number=row.phone_number,
        avatar=row.avatar,
    )

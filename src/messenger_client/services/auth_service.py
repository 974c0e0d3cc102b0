from __future__ import annotations

from messenger_client.application.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from messenger_client.application.ports.store import RemoteStore
from messenger_client.domain.entities.user import NewUser, User
from messenger_client.services.projections import (
    DEFAULT_AVATAR_BASE_URL,
    initials_avatar_url,
)


async def sign_in(phone_number: str, store: RemoteStore) -> User:
    """Look up a registered user by phone number."""
    phone_number = phone_number.strip()
    if not phone_number:
        raise ValidationError("Phone number cannot be empty.")

    user = await store.find_user_by_phone(phone_number)
    if user is None:
        raise NotFoundError("Phone number not found. Please check the number or sign up.")
    return user


async def sign_up(
    name: str,
    phone_number: str,
    store: RemoteStore,
    *,
    avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
) -> User:
    """Register a new user with an initials avatar derived from the name."""
    phone_number = phone_number.strip()
    name = name.strip()
    if not phone_number:
        raise ValidationError("Phone number cannot be empty.")
    if not name:
        raise ValidationError("Name cannot be empty.")

    if await store.find_user_by_phone(phone_number) is not None:
        raise ConflictError("This phone number is already registered. Please sign in.")

    return await store.insert_user(
        NewUser(
            name=name,
            phone_number=phone_number,
            avatar=initials_avatar_url(name, avatar_base_url),
        )
    )

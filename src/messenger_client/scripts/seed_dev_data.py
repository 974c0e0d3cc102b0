"""Create the schema and seed development data: three users, one private and
one group conversation with a few messages."""
from __future__ import annotations

import asyncio
import logging

from messenger_client.config import settings
from messenger_client.domain.entities.conversation import NewConversation, ParticipantRow
from messenger_client.domain.entities.message import NewMessage
from messenger_client.domain.entities.user import NewUser
from messenger_client.domain.value_objects.enums import ConversationType, MessageType
from messenger_client.infrastructure.db import models  # noqa: F401
from messenger_client.infrastructure.db.base import Base
from messenger_client.infrastructure.db.repositories.conversation import ConversationRepo
from messenger_client.infrastructure.db.repositories.message import MessageRepo
from messenger_client.infrastructure.db.repositories.user import UserRepo
from messenger_client.infrastructure.db.session import AsyncSessionLocal, engine
from messenger_client.services.projections import initials_avatar_url

logger = logging.getLogger(__name__)


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        users = UserRepo(session)
        conversations = ConversationRepo(session)
        messages = MessageRepo(session)

        people = {}
        for name, phone in (("Alice", "+10000000001"), ("Bob", "+10000000002"), ("Carol", "+10000000003")):
            people[name] = await users.create(
                NewUser(
                    name=name,
                    phone_number=phone,
                    avatar=initials_avatar_url(name, settings.AVATAR_BASE_URL),
                )
            )

        private = await conversations.create(NewConversation(type=ConversationType.PRIVATE))
        await conversations.add_participants([
            ParticipantRow(conversation_id=private.id, user_id=people["Alice"].id),
            ParticipantRow(conversation_id=private.id, user_id=people["Bob"].id),
        ])

        group_name = "Weekend plans"
        group = await conversations.create(
            NewConversation(
                type=ConversationType.GROUP,
                name=group_name,
                avatar=initials_avatar_url(group_name, settings.AVATAR_BASE_URL),
            )
        )
        await conversations.add_participants([
            ParticipantRow(conversation_id=group.id, user_id=u.id) for u in people.values()
        ])

        script = [
            (private.id, "Alice", "Hi Bob!"),
            (private.id, "Bob", "Hey Alice, how are you?"),
            (group.id, "Carol", "Hiking on Saturday?"),
            (group.id, "Alice", "Count me in"),
        ]
        for conversation_id, sender, content in script:
            await messages.create(
                NewMessage(
                    conversation_id=conversation_id,
                    sender_id=people[sender].id,
                    content=content,
                    type=MessageType.TEXT,
                )
            )

        await session.commit()
        logger.info(
            "Seeded %d users, 2 conversations, %d messages",
            len(people), len(script),
        )


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()

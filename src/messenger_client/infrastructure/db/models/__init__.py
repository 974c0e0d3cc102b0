"""Import all models so Base.metadata sees every table."""
from messenger_client.infrastructure.db.models.conversation import ConversationModel
from messenger_client.infrastructure.db.models.message import MessageModel
from messenger_client.infrastructure.db.models.participant import ParticipantModel
from messenger_client.infrastructure.db.models.user import UserModel

__all__ = [
    "ConversationModel",
    "MessageModel",
    "ParticipantModel",
    "UserModel",
]

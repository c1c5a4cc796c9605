"""Abstract interfaces for infrastructure abstraction."""

from llynx.interfaces.agent_repository import IAgentRepository
from llynx.interfaces.auth_provider import IAuthProvider, User
from llynx.interfaces.chat_backend import EnvelopeStream, IChatBackend
from llynx.interfaces.conversation_repository import (
    IConversationRepository,
    IConversationTransaction,
)

__all__ = [
    "IAgentRepository",
    "IAuthProvider",
    "User",
    "EnvelopeStream",
    "IChatBackend",
    "IConversationRepository",
    "IConversationTransaction",
]

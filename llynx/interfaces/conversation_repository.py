"""
Conversation repository interface.

Defines the contract for conversation/message persistence used by the chat
relay. All operations run inside one transaction so the
"create + first message + title" sequence is atomic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Optional

from llynx.models.conversation import Conversation
from llynx.models.enums import ChatRole


class IConversationTransaction(ABC):
    """Unit of work over conversations and messages."""

    @abstractmethod
    async def find_conversation(self, conversation_id: str, owner_id: str) -> Optional[Conversation]:
        """
        Get a conversation owned by the given user.

        Returns:
            Conversation, or None when missing or owned by someone else
        """
        pass

    @abstractmethod
    async def create_conversation(self, owner_id: str, model_ident: str) -> Conversation:
        """
        Create an empty conversation.

        Args:
            owner_id: Owner user ID
            model_ident: Serialized selection

        Returns:
            Created conversation
        """
        pass

    @abstractmethod
    async def append_message(self, conversation_id: str, role: ChatRole, content: str) -> None:
        """Append a message at the end of the conversation."""
        pass

    @abstractmethod
    async def has_messages(self, conversation_id: str) -> bool:
        """Check whether the conversation already holds any message."""
        pass

    @abstractmethod
    async def set_title_if_unset(self, conversation_id: str, title: str) -> None:
        """Set the title unless one is already stored."""
        pass

    @abstractmethod
    async def touch_conversation(self, conversation_id: str, model_ident: str) -> None:
        """Bump updated_at and record the selection used for the latest turn."""
        pass


class IConversationRepository(ABC):
    """Abstract interface for conversation persistence."""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[IConversationTransaction]:
        """
        Open a transaction.

        Commits when the block exits normally, rolls back otherwise.
        Storage failures surface as PersistenceError.
        """
        pass

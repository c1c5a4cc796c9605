"""
Conversation and message models.

These models persist chat history for authenticated users.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from llynx.models.enums import ChatRole

DEFAULT_TITLE = "New Chat"
TITLE_MAX_WORDS = 8
TITLE_MAX_LENGTH = 80


class Conversation(BaseModel):
    """Conversation model."""

    id: str
    user_id: str = Field(..., description="Owner user ID")
    title: Optional[str] = Field(None, max_length=200)
    model: Optional[str] = Field(None, description="Serialized selection, e.g. model:gemma3:1b")
    created_at: datetime
    updated_at: datetime


class Message(BaseModel):
    """Persisted chat message."""

    id: int
    conversation_id: str
    role: ChatRole
    content: str = ""
    created_at: datetime


def derive_title(content: str) -> str:
    """
    Build a conversation title from the first user message.

    Takes the first eight words; anything longer than 80 characters is cut
    and marked with an ellipsis.
    """
    title = " ".join(content.split()[:TITLE_MAX_WORDS])
    if not title:
        return DEFAULT_TITLE
    if len(title) > TITLE_MAX_LENGTH:
        title = title[: TITLE_MAX_LENGTH - 1].rstrip() + "…"
    return title

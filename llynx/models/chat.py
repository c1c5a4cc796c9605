"""
Chat model definitions.

Request body of the chat relay endpoint and the messages it carries.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from llynx.models.enums import ChatRole


class ChatMessage(BaseModel):
    """A single chat turn."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str = Field(..., max_length=200000)

    def to_upstream(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(..., min_length=1, description="Conversation history, oldest first")
    model: Optional[str] = Field(
        None,
        max_length=300,
        description="Selection string: model:<name>, agent:<id>, remote:<name> or a bare model name",
    )
    agent_id: Optional[str] = Field(None, alias="agentId", max_length=100)
    conversation_id: Optional[str] = Field(None, alias="conversationId", max_length=100)

    def latest_user_message(self) -> Optional[ChatMessage]:
        """The message that triggered this turn (last user message)."""
        for message in reversed(self.messages):
            if message.role == ChatRole.USER:
                return message
        return None

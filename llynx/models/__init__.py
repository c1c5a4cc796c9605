"""Pydantic models (schemas) and value objects for the application."""

from llynx.models.enums import ChatRole, RelayState, SelectionKind, UpstreamKind
from llynx.models.agent import Agent, AgentCreate, SamplingOptions
from llynx.models.chat import ChatMessage, ChatRequest
from llynx.models.conversation import Conversation, Message, derive_title
from llynx.models.envelope import Envelope
from llynx.models.selection import ResolvedTarget, Selection, normalize_selection

__all__ = [
    # Enums
    "ChatRole",
    "RelayState",
    "SelectionKind",
    "UpstreamKind",
    # Agent
    "Agent",
    "AgentCreate",
    "SamplingOptions",
    # Chat
    "ChatMessage",
    "ChatRequest",
    # Conversation
    "Conversation",
    "Message",
    "derive_title",
    # Stream
    "Envelope",
    # Selection
    "ResolvedTarget",
    "Selection",
    "normalize_selection",
]

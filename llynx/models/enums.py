"""
Enum definitions for the application.

These enums are used across models and provide type-safe role/backend values.
"""

from enum import Enum


class ChatRole(str, Enum):
    """Role of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class SelectionKind(str, Enum):
    """
    What a client selection points at.

    MODEL = A model served by the local inference server
    AGENT = A saved agent preset owned by the caller
    REMOTE = A model served by the remote completion API
    """

    MODEL = "model"
    AGENT = "agent"
    REMOTE = "remote"


class UpstreamKind(str, Enum):
    """Which upstream backend serves a resolved target."""

    LOCAL = "local"
    REMOTE = "remote"


class RelayState(str, Enum):
    """Lifecycle of a single chat relay."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

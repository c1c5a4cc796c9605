"""Builds the final message list sent upstream."""

from __future__ import annotations

from llynx.models.chat import ChatMessage
from llynx.models.enums import ChatRole, UpstreamKind
from llynx.models.selection import ResolvedTarget


def assemble_messages(history: list[ChatMessage], target: ResolvedTarget) -> list[ChatMessage]:
    """
    Apply the system prompt policy of the target backend.

    Local: a client-supplied system message is kept as is, otherwise the
    target's system prompt goes first. Remote: system messages are dropped.
    Order of the remaining messages is preserved.
    """
    if target.upstream == UpstreamKind.REMOTE:
        return [message for message in history if message.role != ChatRole.SYSTEM]

    if not target.system_prompt or any(message.role == ChatRole.SYSTEM for message in history):
        return list(history)

    return [ChatMessage(role=ChatRole.SYSTEM, content=target.system_prompt), *history]

"""
Unit tests for message assembly.
"""

from llynx.models.chat import ChatMessage
from llynx.models.enums import ChatRole, SelectionKind, UpstreamKind
from llynx.models.selection import ResolvedTarget, Selection
from llynx.services.message_assembler import assemble_messages


def _local(prompt="Be helpful.") -> ResolvedTarget:
    return ResolvedTarget(
        selection=Selection(SelectionKind.MODEL, "llama3"),
        upstream=UpstreamKind.LOCAL,
        model_name="llama3",
        system_prompt=prompt,
    )


def _remote() -> ResolvedTarget:
    return ResolvedTarget(
        selection=Selection(SelectionKind.REMOTE, "gpt-5"),
        upstream=UpstreamKind.REMOTE,
        model_name="gpt-5",
        system_prompt=None,
    )


def _msg(role: ChatRole, content: str) -> ChatMessage:
    return ChatMessage(role=role, content=content)


def test_local_prepends_system_prompt():
    history = [_msg(ChatRole.USER, "hi"), _msg(ChatRole.ASSISTANT, "hello"), _msg(ChatRole.USER, "bye")]

    result = assemble_messages(history, _local())

    assert result[0] == _msg(ChatRole.SYSTEM, "Be helpful.")
    assert result[1:] == history


def test_local_keeps_client_system_message():
    history = [_msg(ChatRole.SYSTEM, "Talk like a pirate."), _msg(ChatRole.USER, "hi")]

    result = assemble_messages(history, _local())

    assert result == history


def test_remote_drops_system_messages():
    history = [
        _msg(ChatRole.SYSTEM, "ignored"),
        _msg(ChatRole.USER, "one"),
        _msg(ChatRole.ASSISTANT, "two"),
        _msg(ChatRole.SYSTEM, "also ignored"),
        _msg(ChatRole.USER, "three"),
    ]

    result = assemble_messages(history, _remote())

    assert [m.content for m in result] == ["one", "two", "three"]


def test_input_is_not_mutated():
    history = [_msg(ChatRole.USER, "hi")]

    assemble_messages(history, _local())

    assert history == [_msg(ChatRole.USER, "hi")]

"""
Shared pytest fixtures.
"""

import json
import os

# Use litellm's bundled model cost map; its background remote fetch races imports offline.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")
from typing import Any, Optional

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from llynx.core.config import Settings
from llynx.core.exceptions import UpstreamError
from llynx.infrastructure.local.agent_repository import SqliteAgentRepository
from llynx.infrastructure.local.conversation_repository import SqliteConversationRepository
from llynx.infrastructure.local.database import Base, ConversationORM, MessageORM
from llynx.interfaces.chat_backend import EnvelopeStream, IChatBackend
from llynx.models.envelope import Envelope


def ndjson_line(content: str, done: bool = False, model: str = "gemma3:1b") -> str:
    """One upstream line in the local inference server's format."""
    return json.dumps(
        {
            "model": model,
            "created_at": "2026-01-01T00:00:00Z",
            "message": {"role": "assistant", "content": content},
            "done": done,
        }
    )


class FakeChatBackend(IChatBackend):
    """Scripted upstream: replays lines, optionally failing on open or mid-stream."""

    def __init__(
        self,
        lines: Optional[list[str]] = None,
        open_error: Optional[UpstreamError] = None,
        fail_after: Optional[int] = None,
    ):
        self.lines = lines or []
        self.open_error = open_error
        self.fail_after = fail_after
        self.calls: list[dict[str, Any]] = []
        self.lines_read = 0
        self.close_count = 0

    async def open_stream(self, model_name, messages, options=None) -> EnvelopeStream:
        self.calls.append({"model": model_name, "messages": list(messages), "options": options})
        if self.open_error is not None:
            raise self.open_error

        async def envelopes():
            for index, line in enumerate(self.lines):
                if self.fail_after is not None and index == self.fail_after:
                    raise UpstreamError("connection reset by peer")
                self.lines_read += 1
                envelope = Envelope.parse(line)
                if envelope is not None:
                    yield envelope

        return EnvelopeStream(envelopes(), on_close=self._on_close)

    async def _on_close(self) -> None:
        self.close_count += 1

    async def list_models(self) -> list[dict[str, Any]]:
        return [{"name": "gemma3:1b"}]


@pytest.fixture
async def engine():
    """In-memory SQLite engine shared across sessions of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Create async session factory bound to the test engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a single session for direct assertions."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_user_id():
    """Test user ID."""
    return "test-user-001"


@pytest.fixture
def settings():
    """Settings isolated from the environment and .env file."""
    return Settings(
        _env_file=None,
        DEFAULT_MODEL="gemma3:1b",
        SYSTEM_PROMPT="You are the llynx.\\nBe brief.",
        REMOTE_API_KEY="",
        AUTH_PROVIDER="mock",
    )


@pytest.fixture
def conversation_repo(session_factory):
    return SqliteConversationRepository(session_factory=session_factory)


@pytest.fixture
def agent_repo(session_factory):
    return SqliteAgentRepository(session_factory=session_factory)


@pytest.fixture
def make_backend():
    """Factory for scripted upstream backends."""
    return FakeChatBackend


@pytest.fixture
def make_line():
    """Factory for upstream NDJSON lines."""
    return ndjson_line


@pytest.fixture
def fetch_messages(session_factory):
    """Load persisted messages of a conversation, oldest first."""

    async def _fetch(conversation_id: str) -> list[MessageORM]:
        async with session_factory() as session:
            result = await session.execute(
                select(MessageORM)
                .where(MessageORM.conversation_id == conversation_id)
                .order_by(MessageORM.id)
            )
            return list(result.scalars().all())

    return _fetch


@pytest.fixture
def fetch_conversations(session_factory):
    """Load all conversation rows."""

    async def _fetch() -> list[ConversationORM]:
        async with session_factory() as session:
            result = await session.execute(select(ConversationORM))
            return list(result.scalars().all())

    return _fetch

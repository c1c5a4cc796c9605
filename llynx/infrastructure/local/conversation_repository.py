"""
SQLite implementation of Conversation repository.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from llynx.core.exceptions import PersistenceError
from llynx.infrastructure.local.database import ConversationORM, MessageORM, get_session_factory
from llynx.interfaces.conversation_repository import (
    IConversationRepository,
    IConversationTransaction,
)
from llynx.models.conversation import Conversation
from llynx.models.enums import ChatRole
from llynx.models.selection import normalize_selection


def _conversation_orm_to_model(orm: ConversationORM) -> Conversation:
    """Convert conversation ORM object to Pydantic model."""
    return Conversation(
        id=orm.id,
        user_id=orm.user_id,
        title=orm.title,
        model=normalize_selection(orm.model),
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


class SqliteConversationTransaction(IConversationTransaction):
    """Conversation operations bound to one session."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_conversation(self, conversation_id: str, owner_id: str) -> Optional[Conversation]:
        result = await self._session.execute(
            select(ConversationORM).where(
                and_(
                    ConversationORM.id == conversation_id,
                    ConversationORM.user_id == owner_id,
                )
            )
        )
        orm = result.scalar_one_or_none()
        return _conversation_orm_to_model(orm) if orm else None

    async def create_conversation(self, owner_id: str, model_ident: str) -> Conversation:
        orm = ConversationORM(user_id=owner_id, model=model_ident)
        self._session.add(orm)
        await self._session.flush()
        await self._session.refresh(orm)
        return _conversation_orm_to_model(orm)

    async def append_message(self, conversation_id: str, role: ChatRole, content: str) -> None:
        self._session.add(
            MessageORM(
                conversation_id=conversation_id,
                role=ChatRole(role).value,
                content=content or "",
            )
        )
        await self._session.flush()

    async def has_messages(self, conversation_id: str) -> bool:
        result = await self._session.execute(
            select(MessageORM.id).where(MessageORM.conversation_id == conversation_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def set_title_if_unset(self, conversation_id: str, title: str) -> None:
        await self._session.execute(
            update(ConversationORM)
            .where(
                and_(
                    ConversationORM.id == conversation_id,
                    or_(ConversationORM.title.is_(None), ConversationORM.title == ""),
                )
            )
            .values(title=title)
        )

    async def touch_conversation(self, conversation_id: str, model_ident: str) -> None:
        await self._session.execute(
            update(ConversationORM)
            .where(ConversationORM.id == conversation_id)
            .values(model=model_ident, updated_at=datetime.utcnow())
        )


class SqliteConversationRepository(IConversationRepository):
    """SQLite implementation of conversation repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqliteConversationTransaction]:
        """Run the block in one session; commit on success."""
        try:
            async with self._session_factory() as session:
                yield SqliteConversationTransaction(session)
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Conversation storage failed: {exc}") from exc

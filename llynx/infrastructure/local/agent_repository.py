"""
SQLite implementation of Agent repository.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from llynx.core.exceptions import DuplicateError, PersistenceError
from llynx.infrastructure.local.database import AgentORM, get_session_factory
from llynx.interfaces.agent_repository import IAgentRepository
from llynx.models.agent import Agent, AgentCreate, SamplingOptions


class SqliteAgentRepository(IAgentRepository):
    """SQLite implementation of agent repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: AgentORM) -> Agent:
        """Convert ORM object to Pydantic model."""
        return Agent(
            id=orm.id,
            user_id=orm.user_id,
            name=orm.name,
            base_model=orm.base_model,
            system_prompt=orm.system_prompt,
            # Fields missing from older rows fall back to defaults
            settings=SamplingOptions.model_validate(orm.settings or {}),
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def get(self, user_id: str, agent_id: str) -> Optional[Agent]:
        """
        Get an agent owned by the user.

        Raises:
            PersistenceError: storage unavailable
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AgentORM).where(
                        and_(
                            AgentORM.id == agent_id,
                            AgentORM.user_id == user_id,
                        )
                    )
                )
                orm = result.scalar_one_or_none()
                return self._orm_to_model(orm) if orm else None
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to load agent: {exc}",
                details={"agent_id": agent_id},
            ) from exc

    async def create(self, user_id: str, agent: AgentCreate) -> Agent:
        """Create an agent."""
        async with self._session_factory() as session:
            orm = AgentORM(
                user_id=user_id,
                name=agent.name,
                base_model=agent.base_model,
                system_prompt=agent.system_prompt,
                settings=agent.settings.model_dump(),
            )
            session.add(orm)
            try:
                await session.commit()
                await session.refresh(orm)
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateError(
                    f"Agent name already exists: {agent.name}",
                    details={"user_id": user_id},
                ) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise PersistenceError(f"Failed to create agent: {exc}") from exc
            return self._orm_to_model(orm)

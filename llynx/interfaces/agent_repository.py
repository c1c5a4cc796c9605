"""
Agent repository interface.

The relay only reads agents; creation exists for seeding and tooling.
"""

from abc import ABC, abstractmethod
from typing import Optional

from llynx.models.agent import Agent, AgentCreate


class IAgentRepository(ABC):
    """Abstract interface for agent preset persistence."""

    @abstractmethod
    async def get(self, user_id: str, agent_id: str) -> Optional[Agent]:
        """
        Get an agent owned by the user.

        Args:
            user_id: Owner user ID
            agent_id: Agent ID

        Returns:
            Agent, or None when missing or owned by another user
        """
        pass

    @abstractmethod
    async def create(self, user_id: str, agent: AgentCreate) -> Agent:
        """
        Create an agent.

        Raises:
            DuplicateError: the user already has an agent with this name
        """
        pass

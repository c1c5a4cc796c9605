"""
Unit tests for Agent repository.
"""

import pytest

from llynx.core.exceptions import DuplicateError, PersistenceError
from llynx.infrastructure.local.database import AgentORM
from llynx.models.agent import AgentCreate, SamplingOptions


@pytest.mark.asyncio
async def test_create_and_get_agent(agent_repo, test_user_id):
    """Test creating an agent and reading it back."""
    created = await agent_repo.create(
        test_user_id,
        AgentCreate(
            name="Poet",
            base_model="llama3:8b",
            system_prompt="Answer in verse.",
            settings=SamplingOptions(temperature=1.3, top_k=10),
        ),
    )

    agent = await agent_repo.get(test_user_id, created.id)

    assert agent is not None
    assert agent.name == "Poet"
    assert agent.base_model == "llama3:8b"
    assert agent.system_prompt == "Answer in verse."
    assert agent.settings.temperature == 1.3
    assert agent.settings.top_k == 10


@pytest.mark.asyncio
async def test_get_is_scoped_to_owner(agent_repo, test_user_id):
    created = await agent_repo.create(test_user_id, AgentCreate(name="Poet", base_model="llama3"))

    assert await agent_repo.get("someone-else", created.id) is None
    assert await agent_repo.get(test_user_id, "missing") is None


@pytest.mark.asyncio
async def test_duplicate_name_per_user(agent_repo, test_user_id):
    await agent_repo.create(test_user_id, AgentCreate(name="Poet", base_model="llama3"))

    with pytest.raises(DuplicateError):
        await agent_repo.create(test_user_id, AgentCreate(name="Poet", base_model="gemma3:1b"))

    other = await agent_repo.create("other-user", AgentCreate(name="Poet", base_model="llama3"))
    assert other.user_id == "other-user"


@pytest.mark.asyncio
async def test_partial_stored_settings_take_defaults(agent_repo, db_session, test_user_id):
    db_session.add(
        AgentORM(
            id="old-agent",
            user_id=test_user_id,
            name="Old",
            base_model="llama3",
            settings={"temperature": 0.5},
        )
    )
    await db_session.commit()

    agent = await agent_repo.get(test_user_id, "old-agent")

    assert agent.settings.temperature == 0.5
    assert agent.settings.num_ctx == 2048


@pytest.mark.asyncio
async def test_storage_failure_raises_persistence_error(agent_repo, engine, test_user_id):
    async with engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE agents")

    with pytest.raises(PersistenceError):
        await agent_repo.get(test_user_id, "any-agent")

    with pytest.raises(PersistenceError):
        await agent_repo.create(test_user_id, AgentCreate(name="Poet", base_model="llama3"))

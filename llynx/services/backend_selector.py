"""
Backend selection service.

Turns a client selection into the concrete upstream call: which backend,
which model name, which system prompt and sampling options.
"""

from __future__ import annotations

from typing import Optional

from llynx.core.config import Settings
from llynx.core.exceptions import AuthenticationError, BackendUnavailableError, NotFoundError
from llynx.interfaces.agent_repository import IAgentRepository
from llynx.interfaces.auth_provider import User
from llynx.models.chat import ChatRequest
from llynx.models.enums import SelectionKind, UpstreamKind
from llynx.models.selection import ResolvedTarget, Selection


def selection_from_request(request: ChatRequest, default_model: str) -> Selection:
    """Pick the selection carried by a chat request; `agentId` wins over `model`."""
    agent_id = (request.agent_id or "").strip()
    if agent_id:
        return Selection(SelectionKind.AGENT, agent_id)
    return Selection.parse(request.model, default_model)


class BackendSelector:
    """Resolves selections against settings and the caller's agents."""

    def __init__(self, agent_repo: IAgentRepository, settings: Settings):
        self._agent_repo = agent_repo
        self._settings = settings

    @property
    def default_model(self) -> str:
        return self._settings.DEFAULT_MODEL

    async def resolve(self, selection: Selection, user: Optional[User]) -> ResolvedTarget:
        """
        Resolve a selection.

        Raises:
            AuthenticationError: agent selected without a session
            NotFoundError: agent missing or owned by another user
            BackendUnavailableError: remote selected without a configured credential
        """
        if selection.kind == SelectionKind.AGENT:
            if user is None:
                raise AuthenticationError("Sign in to chat with an agent")
            agent = await self._agent_repo.get(user.id, selection.value)
            if agent is None:
                raise NotFoundError(f"Agent {selection.value} not found")
            return ResolvedTarget(
                selection=selection,
                upstream=UpstreamKind.LOCAL,
                model_name=agent.base_model,
                system_prompt=(agent.system_prompt or "").strip() or self._settings.default_system_prompt,
                options=agent.settings,
            )

        if selection.kind == SelectionKind.REMOTE:
            if not self._settings.has_remote_credential:
                raise BackendUnavailableError("Remote models are not configured")
            return ResolvedTarget(
                selection=selection,
                upstream=UpstreamKind.REMOTE,
                model_name=selection.value,
                system_prompt=None,
            )

        return ResolvedTarget(
            selection=selection,
            upstream=UpstreamKind.LOCAL,
            model_name=selection.value,
            system_prompt=self._settings.default_system_prompt,
        )

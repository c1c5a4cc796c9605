"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from llynx.core.config import Settings, get_settings
from llynx.core.logger import logger
from llynx.interfaces.agent_repository import IAgentRepository
from llynx.interfaces.auth_provider import IAuthProvider, User
from llynx.interfaces.chat_backend import IChatBackend
from llynx.interfaces.conversation_repository import IConversationRepository
from llynx.models.enums import UpstreamKind
from llynx.services.backend_selector import BackendSelector
from llynx.services.chat_relay_service import ChatRelayService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_conversation_repository() -> IConversationRepository:
    """Get conversation repository instance."""
    from llynx.infrastructure.local.conversation_repository import SqliteConversationRepository

    return SqliteConversationRepository()


@lru_cache()
def get_agent_repository() -> IAgentRepository:
    """Get agent repository instance."""
    from llynx.infrastructure.local.agent_repository import SqliteAgentRepository

    return SqliteAgentRepository()


# ===========================================
# Upstream Backend Dependencies
# ===========================================


@lru_cache()
def get_local_backend() -> IChatBackend:
    """Get the local inference server backend."""
    from llynx.infrastructure.local.ollama_backend import OllamaChatBackend

    settings = get_settings()
    return OllamaChatBackend(
        base_url=settings.OLLAMA_URL,
        connect_timeout=settings.UPSTREAM_CONNECT_TIMEOUT_SECONDS,
        read_timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )


@lru_cache()
def get_remote_backend() -> IChatBackend:
    """Get the remote completion API backend."""
    from llynx.infrastructure.local.litellm_backend import LiteLLMChatBackend

    settings = get_settings()
    return LiteLLMChatBackend(
        api_key=settings.REMOTE_API_KEY,
        api_base=settings.REMOTE_API_BASE or None,
        models=settings.REMOTE_MODELS,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )


# ===========================================
# Service Dependencies
# ===========================================


def get_chat_relay_service(
    agent_repo: IAgentRepository = Depends(get_agent_repository),
    conversation_repo: IConversationRepository = Depends(get_conversation_repository),
    local_backend: IChatBackend = Depends(get_local_backend),
    remote_backend: IChatBackend = Depends(get_remote_backend),
    settings: Settings = Depends(get_settings),
) -> ChatRelayService:
    """Build the chat relay service for a request."""
    return ChatRelayService(
        selector=BackendSelector(agent_repo, settings),
        backends={
            UpstreamKind.LOCAL: local_backend,
            UpstreamKind.REMOTE: remote_backend,
        },
        conversation_repo=conversation_repo,
    )


# ===========================================
# Auth Dependencies
# ===========================================


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get authentication provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "local":
        from llynx.infrastructure.auth.local_auth import LocalAuthProvider

        return LocalAuthProvider(settings)

    from llynx.infrastructure.local.mock_auth import MockAuthProvider

    return MockAuthProvider()


def _extract_token(authorization: Optional[str], request: Request, cookie_name: str) -> Optional[str]:
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return request.cookies.get(cookie_name) or None


async def get_optional_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
    settings: Settings = Depends(get_settings),
) -> Optional[User]:
    """
    Get the caller's user, or None for guests.

    The token comes from "Bearer <token>" or the session cookie. A missing
    or invalid token is not an error: the caller is treated as a guest.
    """
    if not auth_provider.is_enabled():
        return None

    token = _extract_token(authorization, request, settings.SESSION_COOKIE_NAME)
    if not token:
        return None

    try:
        return await auth_provider.verify_token(token)
    except Exception as e:
        logger.info(f"Ignoring invalid session token: {e}")
        return None


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

LocalBackend = Annotated[IChatBackend, Depends(get_local_backend)]
RemoteBackend = Annotated[IChatBackend, Depends(get_remote_backend)]
RelayService = Annotated[ChatRelayService, Depends(get_chat_relay_service)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]

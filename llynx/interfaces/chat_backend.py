"""
Chat backend interface.

Defines the contract for upstream model access.
Implementations: local inference server (Ollama), remote completion API (LiteLLM).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Optional

from llynx.models.agent import SamplingOptions
from llynx.models.chat import ChatMessage
from llynx.models.envelope import Envelope


class EnvelopeStream:
    """
    Open upstream stream.

    Iterating yields normalized envelopes; `aclose()` releases the upstream
    connection and is safe to call more than once, started or not.
    """

    def __init__(
        self,
        envelopes: AsyncIterator[Envelope],
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self._envelopes = envelopes
        self._on_close = on_close
        self._closed = False

    def __aiter__(self) -> AsyncIterator[Envelope]:
        return self._envelopes

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            close = getattr(self._envelopes, "aclose", None)
            if close is not None:
                await close()
        finally:
            if self._on_close is not None:
                await self._on_close()


class IChatBackend(ABC):
    """Abstract interface for upstream chat backends."""

    @abstractmethod
    async def open_stream(
        self,
        model_name: str,
        messages: list[ChatMessage],
        options: Optional[SamplingOptions] = None,
    ) -> EnvelopeStream:
        """
        Start a streaming generation.

        The upstream call is established before this returns, so a refused
        or failing backend is reported before any byte reaches the client.

        Args:
            model_name: Upstream model identifier
            messages: Final message list, oldest first
            options: Sampling options (local backend only)

        Returns:
            Stream of envelopes ending with a `done` envelope

        Raises:
            UpstreamError: backend unreachable or returned a non-success status
        """
        pass

    @abstractmethod
    async def list_models(self) -> list[dict[str, Any]]:
        """
        Get the models this backend can serve.

        Returns:
            List of model descriptors, each with at least a `name`
        """
        pass

    async def aclose(self) -> None:
        """Release pooled connections. Default implementation holds none."""
        return None

"""
Remote completion API backend via LiteLLM.

Supports OpenAI and other providers through LiteLLM, with an optional custom
endpoint (api_base) for proxy servers. Output is normalized into the same
envelope lines the local backend produces.
"""

from __future__ import annotations

import inspect
from typing import Any, AsyncIterator, Optional

import litellm

from llynx.core.exceptions import UpstreamError
from llynx.core.logger import setup_logger
from llynx.interfaces.chat_backend import EnvelopeStream, IChatBackend
from llynx.models.agent import SamplingOptions
from llynx.models.chat import ChatMessage
from llynx.models.envelope import Envelope

logger = setup_logger(__name__)

_STREAM_REJECTION_MARKERS = ("unsupported", "not supported", "must be verified")


def is_stream_unsupported(exc: BaseException) -> bool:
    """Check whether the backend refused token streaming for this model/account."""
    if getattr(exc, "code", None) == "unsupported_value" and getattr(exc, "param", None) == "stream":
        return True
    text = str(exc).lower()
    return "stream" in text and any(marker in text for marker in _STREAM_REJECTION_MARKERS)


def _delta_text(chunk: Any) -> str:
    choices = getattr(chunk, "choices", None) or []
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    return (getattr(delta, "content", None) or "") if delta is not None else ""


def _message_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return (getattr(message, "content", None) or "") if message is not None else ""


async def _release(stream: Any) -> None:
    close = getattr(stream, "aclose", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


class LiteLLMChatBackend(IChatBackend):
    """Chat backend for the remote completion API."""

    def __init__(
        self,
        api_key: str,
        api_base: Optional[str] = None,
        models: Optional[list[str]] = None,
        timeout: float = 300.0,
    ):
        """
        Initialize LiteLLM backend.

        Args:
            api_key: Remote API key
            api_base: Custom API endpoint URL (optional, for proxy servers)
            models: Model identifiers offered to clients
            timeout: Request timeout in seconds
        """
        self._api_key = api_key or None
        self._api_base = api_base or None
        self._models = list(models or [])
        self._timeout = timeout

    def _completion_kwargs(self, model_name: str, messages: list[ChatMessage]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model_name,
            "messages": [message.to_upstream() for message in messages],
            "timeout": self._timeout,
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key
        return kwargs

    async def open_stream(
        self,
        model_name: str,
        messages: list[ChatMessage],
        options: Optional[SamplingOptions] = None,
    ) -> EnvelopeStream:
        kwargs = self._completion_kwargs(model_name, messages)
        try:
            stream = await litellm.acompletion(stream=True, **kwargs)
        except Exception as e:
            if not is_stream_unsupported(e):
                raise UpstreamError(
                    f"Remote backend request failed: {e}",
                    status_code=getattr(e, "status_code", None),
                ) from e
            logger.info(f"Streaming rejected for {model_name}, retrying without stream")
            return await self._open_buffered(model_name, kwargs)

        return EnvelopeStream(self._iter_stream(stream, model_name))

    async def _open_buffered(self, model_name: str, kwargs: dict[str, Any]) -> EnvelopeStream:
        try:
            response = await litellm.acompletion(stream=False, **kwargs)
        except Exception as e:
            raise UpstreamError(
                f"Remote backend request failed: {e}",
                status_code=getattr(e, "status_code", None),
            ) from e

        async def envelopes() -> AsyncIterator[Envelope]:
            text = _message_text(response)
            if text:
                yield Envelope.build(model_name, text)
            yield Envelope.build(model_name, "", done=True)

        return EnvelopeStream(envelopes())

    async def _iter_stream(self, stream: Any, model_name: str) -> AsyncIterator[Envelope]:
        try:
            async for chunk in stream:
                text = _delta_text(chunk)
                if text:
                    yield Envelope.build(model_name, text)
        except Exception as e:
            raise UpstreamError(f"Remote stream failed: {e}") from e
        finally:
            await _release(stream)
        yield Envelope.build(model_name, "", done=True)

    async def list_models(self) -> list[dict[str, Any]]:
        if not self._api_key:
            return []
        return [{"name": model} for model in self._models]

"""
Local inference server backend (Ollama-compatible HTTP API).

Streams `/api/chat` output, which arrives as newline-delimited JSON.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Optional

import httpx

from llynx.core.exceptions import UpstreamError
from llynx.core.logger import setup_logger
from llynx.interfaces.chat_backend import EnvelopeStream, IChatBackend
from llynx.models.agent import SamplingOptions
from llynx.models.chat import ChatMessage
from llynx.models.envelope import Envelope

logger = setup_logger(__name__)


class OllamaChatBackend(IChatBackend):
    """Chat backend talking to a local Ollama server."""

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        connect_timeout: float = 10.0,
        read_timeout: float = 300.0,
    ):
        """
        Initialize Ollama backend.

        Args:
            base_url: Server root, e.g. "http://localhost:11434"
            client: Shared HTTP client (optional, mainly for tests)
            connect_timeout: Seconds to wait for the connection
            read_timeout: Seconds to wait for each chunk of the stream
        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(read_timeout, connect=connect_timeout)
        )

    async def open_stream(
        self,
        model_name: str,
        messages: list[ChatMessage],
        options: Optional[SamplingOptions] = None,
    ) -> EnvelopeStream:
        payload: dict[str, Any] = {
            "model": model_name,
            "messages": [message.to_upstream() for message in messages],
            "stream": True,
        }
        if options is not None:
            payload["options"] = options.to_upstream()

        request = self._client.build_request("POST", f"{self._base_url}/api/chat", json=payload)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Ollama unreachable: {exc}") from exc

        if response.is_error:
            try:
                body = (await response.aread()).decode("utf-8", errors="replace").strip()
            except httpx.HTTPError:
                body = ""
            finally:
                await response.aclose()
            raise UpstreamError(
                f"Ollama error: {body or response.status_code}",
                status_code=response.status_code,
            )

        return EnvelopeStream(self._iter_envelopes(response), on_close=response.aclose)

    async def _iter_envelopes(self, response: httpx.Response) -> AsyncIterator[Envelope]:
        try:
            async for line in response.aiter_lines():
                envelope = Envelope.parse(line)
                if envelope is None:
                    if line.strip():
                        logger.debug(f"Skipping malformed upstream line: {line[:200]!r}")
                    continue
                yield envelope
                if envelope.done:
                    return
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise UpstreamError(f"Ollama stream failed: {exc}") from exc

    async def list_models(self) -> list[dict[str, Any]]:
        """Fetch installed models from /api/tags and normalize their shape."""
        try:
            response = await self._client.get(
                f"{self._base_url}/api/tags",
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Ollama unreachable: {exc}") from exc

        if response.is_error:
            raise UpstreamError(
                f"Failed to load models from Ollama: {response.text.strip() or response.status_code}",
                status_code=response.status_code,
            )

        try:
            raw = response.json()
        except ValueError:
            raw = {}
        if isinstance(raw, dict):
            entries = raw.get("models") if isinstance(raw.get("models"), list) else []
        elif isinstance(raw, list):
            entries = raw
        else:
            entries = []

        models = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name") or entry.get("model") or ""
            if not name:
                continue
            details = entry.get("details") if isinstance(entry.get("details"), dict) else {}
            size = entry.get("size")
            models.append(
                {
                    "name": name,
                    "modified_at": entry.get("modified_at"),
                    "size": size if isinstance(size, int) else None,
                    "digest": entry.get("digest"),
                    "family": details.get("family"),
                    "families": details.get("families"),
                    "parameter_size": details.get("parameter_size"),
                    "quantization": details.get("quantization_level") or details.get("quantization"),
                }
            )
        return models

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

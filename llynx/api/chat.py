"""
Chat API endpoint.

Relays a chat turn to the selected model and streams the reply back as
newline-delimited JSON.
"""

import json

import pydantic
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from llynx.api.deps import OptionalUser, RelayService
from llynx.core.exceptions import (
    AuthenticationError,
    BackendUnavailableError,
    LlynxError,
    NotFoundError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from llynx.core.logger import logger
from llynx.models.chat import ChatRequest
from llynx.services.chat_relay_service import ChatRelay

router = APIRouter()

_STATUS_BY_ERROR: list[tuple[type[LlynxError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (BackendUnavailableError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
]


def to_http_exception(error: LlynxError) -> HTTPException:
    """Map a domain error onto the HTTP status the client sees."""
    if isinstance(error, PersistenceError):
        logger.error(f"Storage failure: {error.message}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is temporarily unavailable",
        )
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)


class RelayStreamingResponse(StreamingResponse):
    """Streaming response that always closes its relay, even if the body never starts."""

    def __init__(self, relay: ChatRelay, **kwargs):
        super().__init__(relay.stream(), **kwargs)
        self.relay = relay

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.relay.aclose()


async def _read_chat_request(request: Request) -> ChatRequest:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be JSON",
        )

    try:
        return ChatRequest.model_validate(payload)
    except pydantic.ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        )


@router.post("")
async def chat(
    request: Request,
    user: OptionalUser,
    relay_service: RelayService,
):
    """
    Relay a chat turn.

    Returns a `text/plain` stream with one JSON envelope per line. For signed-in
    users the conversation id is sent in the `X-Conversation-Id` header.
    """
    chat_request = await _read_chat_request(request)

    try:
        relay = await relay_service.start(chat_request, user)
    except LlynxError as e:
        raise to_http_exception(e)

    headers = {
        "Cache-Control": "no-cache, no-transform",
        "X-Accel-Buffering": "no",  # Disable buffering for nginx
    }
    if relay.conversation_id:
        headers["X-Conversation-Id"] = relay.conversation_id

    return RelayStreamingResponse(
        relay,
        media_type="text/plain; charset=utf-8",
        headers=headers,
    )

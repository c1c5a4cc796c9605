"""
Chat relay service.

Records the user turn, opens the upstream stream, and relays it to the
client line by line. The assistant reply is written back exactly once per
request, whether the stream completes, fails, or the client goes away.
"""

from __future__ import annotations

from typing import AsyncIterator, Mapping, Optional

import anyio

from llynx.core.exceptions import NotFoundError, PersistenceError, UpstreamError
from llynx.core.logger import logger
from llynx.interfaces.auth_provider import User
from llynx.interfaces.chat_backend import EnvelopeStream, IChatBackend
from llynx.interfaces.conversation_repository import IConversationRepository
from llynx.models.chat import ChatMessage, ChatRequest
from llynx.models.conversation import derive_title
from llynx.models.enums import ChatRole, RelayState, UpstreamKind
from llynx.models.envelope import Envelope
from llynx.models.selection import ResolvedTarget
from llynx.services.backend_selector import BackendSelector, selection_from_request
from llynx.services.message_assembler import assemble_messages

TERMINAL_STATES = frozenset({RelayState.COMPLETED, RelayState.FAILED, RelayState.CANCELLED})


class ChatRelay:
    """
    One streaming exchange.

    Created per request. `conversation_id` is None for guests, in which case
    nothing is ever written.
    """

    def __init__(
        self,
        target: ResolvedTarget,
        conversation_repo: IConversationRepository,
        conversation_id: Optional[str] = None,
    ):
        self.target = target
        self.conversation_id = conversation_id
        self.state = RelayState.IDLE
        self._conversations = conversation_repo
        self._stream: Optional[EnvelopeStream] = None
        self._chunks: list[str] = []
        self._persisted = False

    @property
    def accumulated_text(self) -> str:
        return "".join(self._chunks)

    @property
    def persisted(self) -> bool:
        return self._persisted

    def _transition(self, state: RelayState) -> None:
        if self.state in TERMINAL_STATES:
            return
        logger.debug(f"Relay {self.conversation_id or 'guest'}: {self.state.value} -> {state.value}")
        self.state = state

    async def open(self, backend: IChatBackend, messages: list[ChatMessage]) -> None:
        """
        Open the upstream stream.

        Raises:
            UpstreamError: backend refused or unreachable (the turn is
                recorded before re-raising)
        """
        try:
            self._stream = await backend.open_stream(
                self.target.model_name,
                messages,
                self.target.options,
            )
        except UpstreamError as e:
            logger.warning(f"Upstream {self.target.model_ident} failed to open: {e.message}")
            self._transition(RelayState.FAILED)
            await self.persist()
            raise
        self._transition(RelayState.STREAMING)

    async def stream(self) -> AsyncIterator[bytes]:
        """Relay upstream lines unchanged, one per line, until the terminal envelope."""
        if self._stream is None:
            raise RuntimeError("Relay stream is not open")

        # Stays CANCELLED unless the loop ends on its own
        outcome = RelayState.CANCELLED
        error_line: Optional[str] = None
        try:
            try:
                async for envelope in self._stream:
                    if envelope.content:
                        self._chunks.append(envelope.content)
                    yield f"{envelope.raw}\n".encode("utf-8")
                    if envelope.done:
                        break
                outcome = RelayState.COMPLETED
            except UpstreamError as e:
                logger.warning(f"Upstream {self.target.model_ident} failed mid-stream: {e.message}")
                outcome = RelayState.FAILED
                error_line = Envelope.error_line(e.message)
            except Exception:
                outcome = RelayState.FAILED
                raise
        finally:
            with anyio.CancelScope(shield=True):
                await self._finish(outcome)

        if error_line is not None:
            yield f"{error_line}\n".encode("utf-8")

    async def aclose(self) -> None:
        """
        Release the upstream and write back whatever arrived.

        Safe to call at any point, including when `stream()` was never
        iterated; a relay that is still open ends up cancelled.
        """
        with anyio.CancelScope(shield=True):
            await self._finish(RelayState.CANCELLED)

    async def _finish(self, outcome: RelayState) -> None:
        self._transition(outcome)
        try:
            if self._stream is not None:
                await self._stream.aclose()
        except Exception as e:
            logger.warning(f"Failed to release upstream stream: {e}")
        await self.persist()

    async def persist(self) -> None:
        """Write the assistant reply back. Runs at most once; storage errors are logged."""
        if self._persisted:
            return
        self._persisted = True
        if self.conversation_id is None:
            return

        text = self.accumulated_text
        try:
            async with self._conversations.transaction() as tx:
                if text:
                    await tx.append_message(self.conversation_id, ChatRole.ASSISTANT, text)
                await tx.touch_conversation(self.conversation_id, self.target.model_ident)
        except PersistenceError:
            logger.exception(f"Failed to persist reply for conversation {self.conversation_id}")


class ChatRelayService:
    """Entry point of the chat relay."""

    def __init__(
        self,
        selector: BackendSelector,
        backends: Mapping[UpstreamKind, IChatBackend],
        conversation_repo: IConversationRepository,
    ):
        self._selector = selector
        self._backends = backends
        self._conversations = conversation_repo

    async def begin_turn(
        self,
        user: Optional[User],
        request: ChatRequest,
        target: ResolvedTarget,
    ) -> Optional[str]:
        """
        Record the user side of the turn.

        Returns:
            Conversation ID, or None for guests

        Raises:
            NotFoundError: conversationId missing or owned by another user
        """
        if user is None:
            return None

        user_message = request.latest_user_message()
        async with self._conversations.transaction() as tx:
            if request.conversation_id:
                conversation = await tx.find_conversation(request.conversation_id, user.id)
                if conversation is None:
                    raise NotFoundError(f"Conversation {request.conversation_id} not found")
            else:
                conversation = await tx.create_conversation(user.id, target.model_ident)

            if user_message is not None:
                is_first = not await tx.has_messages(conversation.id)
                await tx.append_message(conversation.id, ChatRole.USER, user_message.content)
                if is_first:
                    await tx.set_title_if_unset(conversation.id, derive_title(user_message.content))

        return conversation.id

    async def start(self, request: ChatRequest, user: Optional[User]) -> ChatRelay:
        """
        Validate, record the user turn, and open the upstream stream.

        Every validation and authorization failure is raised before the
        upstream is contacted.
        """
        selection = selection_from_request(request, self._selector.default_model)
        target = await self._selector.resolve(selection, user)
        backend = self._backends[target.upstream]

        try:
            conversation_id = await self.begin_turn(user, request, target)
        except PersistenceError:
            logger.exception("Failed to record user turn, relaying without history")
            conversation_id = None

        relay = ChatRelay(target, self._conversations, conversation_id=conversation_id)
        await relay.open(backend, assemble_messages(request.messages, target))
        return relay

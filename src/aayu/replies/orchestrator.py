from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Callable

from common.events import (
    EventEmitter,
    ReplyCompletedEvent,
    ReplyFailedEvent,
    ReplyStartedEvent,
)
from common.ids import utc_now
from aayu.errors import BackendFailureError, ChatNotFoundError
from aayu.history import messages_for_api
from aayu.models import Message, ReplyState
from aayu.replies.backends import AssistantBackend
from aayu.replies.tracker import ReplyTracker
from aayu.sessions.store import SessionStore

logger = logging.getLogger(__name__)


class SubmitOutcome(str, Enum):
    ACCEPTED = "accepted"
    EMPTY = "empty"
    BUSY = "busy"


class ReplyOrchestrator:
    """Turns user input into a committed user/assistant exchange.

    The user message is appended and the chat is marked pending without
    any suspension point, so at most one reply per chat can ever be in
    flight. Chats are only touched through ``SessionStore.append_message``.
    """

    def __init__(
        self,
        store: SessionStore,
        backend: AssistantBackend,
        *,
        tracker: ReplyTracker | None = None,
        emitter: EventEmitter | None = None,
        system_prompt: str | None = None,
        history_limit: int | None = None,
        reply_timeout_s: float | None = 60.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.backend = backend
        self.tracker = tracker or ReplyTracker()
        self.emitter = emitter or store.emitter
        self.system_prompt = system_prompt
        self.history_limit = history_limit
        self.reply_timeout_s = reply_timeout_s
        self._clock = clock
        self._tasks: set[asyncio.Task] = set()

    def is_pending(self, chat_id: str) -> bool:
        return self.tracker.is_pending(chat_id)

    def reply_state(self, chat_id: str) -> ReplyState:
        return self.tracker.state(chat_id)

    def pending_chats(self) -> list[str]:
        return self.tracker.pending()

    async def submit(self, chat_id: str, text: str) -> SubmitOutcome:
        """Append the user's message and wait for the assistant reply.

        Blank text and chats that already await a reply are rejected
        without touching any state. Backend failures never raise here;
        they are reported through ``ReplyFailedEvent``.
        """
        outcome = self._begin(chat_id, text)
        if outcome is SubmitOutcome.ACCEPTED:
            await self._complete(chat_id)
        return outcome

    def submit_nowait(self, chat_id: str, text: str) -> asyncio.Task | None:
        """Like ``submit`` but schedules the backend call and returns at once.

        Must be called from a running event loop. Returns ``None`` when the
        submission was rejected.
        """
        _, task = self.start_reply(chat_id, text)
        return task

    def start_reply(
        self, chat_id: str, text: str
    ) -> tuple[SubmitOutcome, asyncio.Task | None]:
        loop = asyncio.get_running_loop()
        outcome = self._begin(chat_id, text)
        if outcome is not SubmitOutcome.ACCEPTED:
            return outcome, None
        task = loop.create_task(self._complete(chat_id), name=f"reply-{chat_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return outcome, task

    async def aclose(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _begin(self, chat_id: str, text: str) -> SubmitOutcome:
        content = (text or "").strip()
        if not content:
            logger.debug(f"Ignoring blank submission for chat {chat_id}")
            return SubmitOutcome.EMPTY
        if not self.store.has_chat(chat_id):
            raise ChatNotFoundError(chat_id)
        if not self.tracker.begin(chat_id):
            logger.warning(
                f"Reply already pending for chat {chat_id}, submission ignored",
                extra={"chat_id": chat_id},
            )
            return SubmitOutcome.BUSY

        try:
            self.store.append_message(chat_id, Message.user(content, self._clock()))
        except ChatNotFoundError:
            self.tracker.finish(chat_id)
            raise

        self.emitter.emit(ReplyStartedEvent(chat_id=chat_id))
        return SubmitOutcome.ACCEPTED

    async def _complete(self, chat_id: str) -> None:
        reply: str | None = None
        failure: BackendFailureError | None = None
        try:
            try:
                chat = self.store.get_chat(chat_id)
            except ChatNotFoundError:
                logger.debug(f"Chat {chat_id} deleted before reply request")
                return

            messages = messages_for_api(chat, self.system_prompt, self.history_limit)
            try:
                reply = await self._call_backend(chat_id, messages)
            except BackendFailureError as e:
                failure = e
                logger.warning(
                    f"Reply failed for chat {chat_id}: {e}", extra={"chat_id": chat_id}
                )
                return

            try:
                self.store.append_message(
                    chat_id, Message.assistant(reply, self._clock())
                )
            except ChatNotFoundError:
                logger.debug(f"Chat {chat_id} deleted while pending, reply discarded")
                reply = None
        finally:
            self.tracker.finish(chat_id)
            if failure is not None and self.store.has_chat(chat_id):
                self.emitter.emit(ReplyFailedEvent(chat_id=chat_id, error=str(failure)))
            elif reply is not None:
                self.emitter.emit(ReplyCompletedEvent(chat_id=chat_id, content=reply))

    async def _call_backend(self, chat_id: str, messages: list[dict]) -> str:
        try:
            if self.reply_timeout_s is None:
                reply = await self.backend.reply(messages)
            else:
                reply = await asyncio.wait_for(
                    self.backend.reply(messages), timeout=self.reply_timeout_s
                )
        except asyncio.TimeoutError as e:
            raise BackendFailureError(
                chat_id, f"Backend timed out after {self.reply_timeout_s}s"
            ) from e
        except Exception as e:
            raise BackendFailureError(chat_id, str(e) or type(e).__name__) from e

        if not isinstance(reply, str) or not reply.strip():
            raise BackendFailureError(chat_id, "Backend returned an empty reply")
        return reply

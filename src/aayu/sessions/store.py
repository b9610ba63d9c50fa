from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from common.events import (
    ChatCreatedEvent,
    ChatDeletedEvent,
    ChatSelectedEvent,
    ChatTitleChangedEvent,
    Event,
    EventEmitter,
    MessageAppendedEvent,
)
from common.ids import generate_id, utc_now
from aayu.errors import ChatNotFoundError
from aayu.models import (
    PLACEHOLDER_TITLE,
    TITLE_MAX_CHARS,
    Chat,
    Message,
    derive_title,
)

logger = logging.getLogger(__name__)


@dataclass
class _ChatRecord:
    id: str
    title: str
    created_at: datetime
    sequence: int
    messages: list[Message] = field(default_factory=list)

    def snapshot(self) -> Chat:
        return Chat(
            id=self.id,
            title=self.title,
            created_at=self.created_at,
            messages=tuple(self.messages),
        )


class SessionStore:
    """In-memory owner of every chat and of the selection cursor.

    All mutations go through the methods below and are serialized by a
    re-entrant lock, so the store can be shared by threads as well as by
    tasks on one event loop. Callers only ever see frozen ``Chat``
    snapshots.

    Events are emitted after the lock is released.
    """

    def __init__(
        self,
        emitter: EventEmitter | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
        placeholder_title: str = PLACEHOLDER_TITLE,
        title_max_chars: int = TITLE_MAX_CHARS,
    ):
        self.emitter = emitter or EventEmitter()
        self.placeholder_title = placeholder_title
        self.title_max_chars = title_max_chars
        self._clock = clock
        self._id_factory = id_factory
        self._chats: dict[str, _ChatRecord] = {}
        self._selected: str | None = None
        self._sequence = itertools.count()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._chats)

    def has_chat(self, chat_id: str) -> bool:
        with self._lock:
            return chat_id in self._chats

    def create_chat(self) -> str:
        with self._lock:
            chat_id = self._id_factory()
            while chat_id in self._chats:
                logger.debug(f"Chat id collision on {chat_id}, regenerating")
                chat_id = self._id_factory()
            self._chats[chat_id] = _ChatRecord(
                id=chat_id,
                title=self.placeholder_title,
                created_at=self._clock(),
                sequence=next(self._sequence),
            )
            self._selected = chat_id
        logger.info(f"Created chat {chat_id}")
        self._emit(ChatCreatedEvent(chat_id=chat_id))
        return chat_id

    def select_chat(self, chat_id: str) -> None:
        with self._lock:
            if chat_id not in self._chats:
                raise ChatNotFoundError(chat_id)
            self._selected = chat_id
        logger.debug(f"Selected chat {chat_id}")
        self._emit(ChatSelectedEvent(chat_id=chat_id))

    def delete_chat(self, chat_id: str) -> bool:
        with self._lock:
            record = self._chats.pop(chat_id, None)
            if record is None:
                logger.warning(f"Delete ignored: chat {chat_id} not found")
                return False
            was_selected = self._selected == chat_id
            if was_selected:
                self._selected = None
        logger.info(f"Deleted chat {chat_id} ({len(record.messages)} messages)")
        self._emit(ChatDeletedEvent(chat_id=chat_id, was_selected=was_selected))
        return True

    def append_message(self, chat_id: str, message: Message) -> Chat:
        """Append ``message`` to the end of a chat and return the new snapshot.

        The first user message appended to a chat that still has no
        messages and the placeholder title also sets the chat title.
        """
        new_title: str | None = None
        with self._lock:
            record = self._chats.get(chat_id)
            if record is None:
                raise ChatNotFoundError(chat_id)
            if (
                message.role == "user"
                and not record.messages
                and record.title == self.placeholder_title
            ):
                new_title = derive_title(message.content, self.title_max_chars)
                record.title = new_title
            record.messages.append(message)
            index = len(record.messages) - 1
            snapshot = record.snapshot()

        logger.debug(f"Appended {message.role} message #{index} to chat {chat_id}")
        self._emit(MessageAppendedEvent(chat_id=chat_id, role=message.role, index=index))
        if new_title is not None:
            self._emit(ChatTitleChangedEvent(chat_id=chat_id, title=new_title))
        return snapshot

    def get_chat(self, chat_id: str) -> Chat:
        with self._lock:
            record = self._chats.get(chat_id)
            if record is None:
                raise ChatNotFoundError(chat_id)
            return record.snapshot()

    def list_chats(self) -> list[Chat]:
        with self._lock:
            records = sorted(
                self._chats.values(),
                key=lambda r: (r.created_at, r.sequence),
                reverse=True,
            )
            return [r.snapshot() for r in records]

    def get_selected(self) -> Chat | None:
        with self._lock:
            if self._selected is None:
                return None
            return self._chats[self._selected].snapshot()

    @property
    def selected_id(self) -> str | None:
        with self._lock:
            return self._selected

    def _emit(self, event: Event) -> None:
        self.emitter.emit(event)

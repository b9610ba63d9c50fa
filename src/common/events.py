from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeAlias


@dataclass(frozen=True, slots=True)
class ChatCreatedEvent:
    chat_id: str


@dataclass(frozen=True, slots=True)
class ChatSelectedEvent:
    chat_id: str


@dataclass(frozen=True, slots=True)
class ChatDeletedEvent:
    chat_id: str
    was_selected: bool = False


@dataclass(frozen=True, slots=True)
class MessageAppendedEvent:
    chat_id: str
    role: str
    index: int


@dataclass(frozen=True, slots=True)
class ChatTitleChangedEvent:
    chat_id: str
    title: str


@dataclass(frozen=True, slots=True)
class ProfileUpdatedEvent:
    name: str


@dataclass(frozen=True, slots=True)
class ReplyStartedEvent:
    chat_id: str


@dataclass(frozen=True, slots=True)
class ReplyCompletedEvent:
    chat_id: str
    content: str


@dataclass(frozen=True, slots=True)
class ReplyFailedEvent:
    chat_id: str
    error: str


Event: TypeAlias = (
    ChatCreatedEvent
    | ChatSelectedEvent
    | ChatDeletedEvent
    | MessageAppendedEvent
    | ChatTitleChangedEvent
    | ProfileUpdatedEvent
    | ReplyStartedEvent
    | ReplyCompletedEvent
    | ReplyFailedEvent
)
EventCallback: TypeAlias = Callable[[Event], None] | None


class EventEmitter:
    def __init__(self, callback: EventCallback = None):
        self._callbacks: list[Callable[[Event], None]] = []
        if callback is not None:
            self._callbacks.append(callback)

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self._callbacks.append(callback)

    def unsubscribe(self, callback: Callable[[Event], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self, event: Event) -> None:
        for callback in list(self._callbacks):
            callback(event)

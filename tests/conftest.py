import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from aayu.sessions.profile import ProfileStore
from aayu.sessions.store import SessionStore
from common.events import EventEmitter


class FakeClock:
    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class ScriptedBackend:
    def __init__(self, replies: list[str] | None = None):
        self.replies = list(replies or [])
        self.calls: list[list[dict]] = []

    async def reply(self, messages: list[dict]) -> str:
        self.calls.append(messages)
        if self.replies:
            return self.replies.pop(0)
        return f"echo: {messages[-1]['content']}"


class GatedBackend:
    """Blocks every reply until ``release`` is called."""

    def __init__(self, reply_text: str = "ok", error: Exception | None = None):
        self.reply_text = reply_text
        self.error = error
        self.calls: list[list[dict]] = []
        self.started = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def reply(self, messages: list[dict]) -> str:
        self.calls.append(messages)
        self.started.set()
        await self._gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply_text


class FailingBackend:
    def __init__(self, error: Exception | None = None):
        self.error = error or ConnectionError("backend unreachable")
        self.calls = 0

    async def reply(self, messages: list[dict]) -> str:
        self.calls += 1
        raise self.error


class EventRecorder:
    def __init__(self):
        self.events = []

    def __call__(self, event) -> None:
        self.events.append(event)

    def of_type(self, cls):
        return [e for e in self.events if isinstance(e, cls)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def emitter(recorder):
    return EventEmitter(recorder)


@pytest.fixture
def store(emitter, clock):
    return SessionStore(emitter, clock=clock)


@pytest.fixture
def profile_store(emitter):
    return ProfileStore(emitter=emitter)


@pytest.fixture
def scripted_backend():
    return ScriptedBackend()


@pytest.fixture
def gated_backend():
    return GatedBackend()


@pytest.fixture
def failing_backend():
    return FailingBackend()

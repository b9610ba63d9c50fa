from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from common.ids import utc_now

PLACEHOLDER_TITLE = "New Chat"
TITLE_MAX_CHARS = 30
TITLE_ELLIPSIS = "..."

Role = Literal["user", "assistant"]


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=utc_now)

    @classmethod
    def user(cls, content: str, timestamp: datetime | None = None) -> "Message":
        return cls(role="user", content=content, timestamp=timestamp or utc_now())

    @classmethod
    def assistant(cls, content: str, timestamp: datetime | None = None) -> "Message":
        return cls(role="assistant", content=content, timestamp=timestamp or utc_now())


class Chat(BaseModel):
    """Read-only snapshot of a chat held by the session store."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = PLACEHOLDER_TITLE
    created_at: datetime
    messages: tuple[Message, ...] = ()

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None


class Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Guest"


class ReplyState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


def derive_title(
    text: str,
    max_chars: int = TITLE_MAX_CHARS,
    ellipsis: str = TITLE_ELLIPSIS,
) -> str:
    text = text.strip()
    if len(text) > max_chars:
        return text[:max_chars] + ellipsis
    return text

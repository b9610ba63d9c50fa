from aayu.errors import (
    AayuError,
    BackendFailureError,
    ChatNotFoundError,
    InvalidInputError,
)
from aayu.models import Chat, Message, Profile, ReplyState, derive_title

__all__ = [
    "AayuError",
    "BackendFailureError",
    "ChatNotFoundError",
    "InvalidInputError",
    "Chat",
    "Message",
    "Profile",
    "ReplyState",
    "derive_title",
]

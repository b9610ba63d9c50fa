from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from aayu.models import Chat, Message, Profile, ReplyState, derive_title


def test_derive_title_short_text_is_kept():
    assert derive_title("short") == "short"


def test_derive_title_trims_whitespace():
    assert derive_title("   hello there  ") == "hello there"


def test_derive_title_exactly_thirty_chars_has_no_ellipsis():
    text = "a" * 30
    assert derive_title(text) == text


def test_derive_title_truncates_long_text_with_ellipsis():
    text = "What are the symptoms of a vitamin D deficiency?"
    assert derive_title(text) == text[:30] + "..."


def test_derive_title_custom_limit():
    assert derive_title("abcdefgh", max_chars=4) == "abcd..."


def test_message_is_immutable():
    message = Message.user("hi")
    with pytest.raises(ValidationError):
        message.content = "changed"


def test_message_rejects_unknown_role():
    with pytest.raises(ValidationError):
        Message(role="system", content="nope")


def test_message_timestamp_defaults_to_utc():
    message = Message.assistant("hello")
    assert message.timestamp.tzinfo is not None


def test_chat_snapshot_is_frozen():
    chat = Chat(id="abc", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert chat.title == "New Chat"
    assert chat.messages == ()
    assert chat.last_message is None
    with pytest.raises(ValidationError):
        chat.title = "other"


def test_profile_defaults_to_guest():
    assert Profile().name == "Guest"


def test_reply_state_values():
    assert ReplyState.IDLE.value == "idle"
    assert ReplyState.PENDING.value == "pending"

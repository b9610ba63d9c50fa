from typing import Any

from aayu.models import Chat


def messages_for_api(
    chat: Chat,
    system_prompt: str | None = None,
    max_messages: int | None = None,
) -> list[dict[str, Any]]:
    """Build a chat-completion message list from a chat, oldest first.

    When ``max_messages`` is set only the most recent turns are kept; the
    system prompt is always the first entry.
    """
    turns = list(chat.messages)
    if max_messages is not None:
        turns = turns[-max_messages:]

    msgs: list[dict[str, Any]] = []
    if system_prompt:
        msgs.append({"role": "system", "content": system_prompt})
    msgs.extend({"role": m.role, "content": m.content} for m in turns)
    return msgs


def latest_user_text(messages: list[dict[str, Any]]) -> str:
    for message in reversed(messages):
        if message.get("role") == "user":
            return str(message.get("content", ""))
    return ""

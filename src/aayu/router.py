from collections.abc import Container
from dataclasses import dataclass


@dataclass(frozen=True)
class ChatInput:
    """One line typed into the chat prompt.

    ``kind`` is ``message``, ``command``, ``unknown`` or ``empty``.
    """

    kind: str
    text: str
    command: str | None = None


def parse_input(raw: str, commands: Container[str]) -> ChatInput:
    """Split a prompt line into a chat message or a slash command.

    Command names are case-insensitive. A leading ``//`` sends the rest of
    the line, slash included, as a message.
    """
    text = raw.strip()
    if not text:
        return ChatInput(kind="empty", text="")
    if text.startswith("//"):
        return ChatInput(kind="message", text=text[1:])
    if not text.startswith("/"):
        return ChatInput(kind="message", text=text)

    head, _, rest = text[1:].partition(" ")
    name = head.lower()
    kind = "command" if name in commands else "unknown"
    return ChatInput(kind=kind, text=rest.strip(), command=name)

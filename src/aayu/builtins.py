from datetime import datetime

from aayu.config import resolve_model_alias
from aayu.errors import ChatNotFoundError, InvalidInputError
from aayu.replies.backends import build_backend


def format_date(value: datetime) -> str:
    return value.astimezone().strftime("%b %d")


def format_time(value: datetime) -> str:
    return value.astimezone().strftime("%I:%M %p")


class BuiltinCommands:
    def __init__(self, runtime):
        self.runtime = runtime
        self._handlers = {
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
            "new": self.cmd_new,
            "chats": self.cmd_chats,
            "select": self.cmd_select,
            "delete": self.cmd_delete,
            "history": self.cmd_history,
            "name": self.cmd_name,
            "model": self.cmd_model,
            "help": self.cmd_help,
        }

    def register(self, name: str, handler) -> None:
        self._handlers[name] = handler

    def list_commands(self) -> list[str]:
        return sorted(self._handlers.keys())

    def has_command(self, name: str) -> bool:
        return name in self._handlers

    def handle(self, name: str, args: str) -> bool:
        handler = self._handlers.get(name)
        if not handler:
            return True
        return handler(args)

    def resolve_chat_id(self, ref: str) -> str:
        """Accept a chat id or its 1-based position in the /chats listing."""
        ref = ref.strip()
        if self.runtime.store.has_chat(ref):
            return ref
        if ref.isdigit():
            chats = self.runtime.store.list_chats()
            index = int(ref) - 1
            if 0 <= index < len(chats):
                return chats[index].id
        raise ChatNotFoundError(ref)

    def cmd_quit(self, args: str) -> bool:
        print("👋 Goodbye!")
        return False

    def cmd_new(self, args: str) -> bool:
        chat_id = self.runtime.store.create_chat()
        print(f"✅ Started new chat {chat_id}")
        return True

    def cmd_chats(self, args: str) -> bool:
        chats = self.runtime.store.list_chats()
        if not chats:
            print("No chats yet. Type a message or /new to start one.")
            return True
        selected = self.runtime.store.selected_id
        print("Chats:")
        for position, chat in enumerate(chats, start=1):
            marker = "*" if chat.id == selected else " "
            pending = " (waiting for reply)" if self.runtime.orchestrator.is_pending(chat.id) else ""
            print(
                f" {marker}{position}. {chat.id} - {chat.title} "
                f"[{format_date(chat.created_at)}, {len(chat.messages)} messages]{pending}"
            )
        return True

    def cmd_select(self, args: str) -> bool:
        if not args:
            print("Usage: /select <id or number>")
            return True
        try:
            chat_id = self.resolve_chat_id(args)
            self.runtime.store.select_chat(chat_id)
        except ChatNotFoundError as e:
            print(f"❌ {e}")
            return True
        chat = self.runtime.store.get_chat(chat_id)
        print(f"✅ Switched to {chat.title}")
        return True

    def cmd_delete(self, args: str) -> bool:
        if not args:
            selected = self.runtime.store.selected_id
            if selected is None:
                print("Usage: /delete <id or number>")
                return True
            args = selected
        try:
            chat_id = self.resolve_chat_id(args)
        except ChatNotFoundError as e:
            print(f"❌ {e}")
            return True
        self.runtime.store.delete_chat(chat_id)
        return True

    def cmd_history(self, args: str) -> bool:
        chat = self.runtime.current_chat()
        if chat is None:
            print("No chat selected")
            return True
        if not chat.messages:
            print(f"{chat.title}: no messages yet")
            return True
        name = self.runtime.current_profile().name
        print(f"{chat.title}:")
        for message in chat.messages:
            speaker = name if message.role == "user" else "Assistant"
            print(f"  [{format_time(message.timestamp)}] {speaker}: {message.content}")
        return True

    def cmd_name(self, args: str) -> bool:
        if not args.strip():
            print(f"Current name: {self.runtime.current_profile().name}")
            return True
        try:
            self.runtime.profile.set_name(args)
        except InvalidInputError as e:
            print(f"❌ {e}")
        return True

    def cmd_model(self, args: str) -> bool:
        config = self.runtime.config
        if not args:
            print(f"Current model: {config.model} (backend: {config.backend})")
            return True
        config.model = resolve_model_alias(args.strip())
        config.backend = "litellm"
        self.runtime.set_backend(build_backend(config))
        print(f"✅ Switched to model: {config.model}")
        return True

    def cmd_help(self, args: str) -> bool:
        print("\nCommands:")
        for name in self.list_commands():
            print(f"  /{name}")
        print()
        return True

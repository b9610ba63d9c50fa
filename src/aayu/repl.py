import asyncio
import logging

from common.events import (
    ChatDeletedEvent,
    Event,
    ProfileUpdatedEvent,
    ReplyCompletedEvent,
    ReplyFailedEvent,
)
from aayu.builtins import BuiltinCommands
from aayu.errors import ChatNotFoundError
from aayu.replies.orchestrator import SubmitOutcome
from aayu.router import parse_input

logger = logging.getLogger(__name__)


def print_event(event: Event) -> None:
    if isinstance(event, ChatDeletedEvent):
        print("🗑️  Chat deleted: your chat has been successfully deleted.")
    elif isinstance(event, ProfileUpdatedEvent):
        print(f"✅ Profile updated: your name is now {event.name}.")
    elif isinstance(event, ReplyCompletedEvent):
        print(f"\n{event.content}")
    elif isinstance(event, ReplyFailedEvent):
        print(f"\n❌ The assistant could not reply: {event.error}. Try sending again.")


class ChatREPL:
    def __init__(self, runtime):
        self.runtime = runtime
        self.builtins = BuiltinCommands(runtime)
        self.runtime.emitter.subscribe(print_event)

    def send(self, text: str) -> SubmitOutcome:
        try:
            outcome = self.runtime.send_nowait(text)
        except ChatNotFoundError as e:
            print(f"❌ {e}")
            return SubmitOutcome.EMPTY
        if outcome is SubmitOutcome.BUSY:
            print("⏳ Still waiting for the previous reply in this chat")
        return outcome

    async def run(self) -> None:
        print(f"🩺 AayuSathi ready, {self.runtime.current_profile().name} (model: {self.runtime.config.model})")
        print("Commands: /help for all commands")
        print()

        while True:
            try:
                line = await asyncio.to_thread(input, "\n> ")
                parsed = parse_input(line, self.builtins.list_commands())

                if parsed.kind == "empty":
                    continue
                if parsed.kind == "command":
                    if not self.builtins.handle(parsed.command, parsed.text):
                        break
                    continue
                if parsed.kind == "unknown":
                    print(
                        f"Unknown command: /{parsed.command}. Type /help for available commands."
                    )
                    continue

                self.send(parsed.text)

            except KeyboardInterrupt:
                print("\n\n⚠️  Interrupted")
                break
            except EOFError:
                break
            except Exception as e:
                logger.exception("Unexpected error in chat loop")
                print(f"\n❌ Error: {e}")

        await self.runtime.aclose()

import logging

from common.events import EventEmitter
from aayu.config import ChatConfig
from aayu.models import Chat, Profile
from aayu.replies.backends import AssistantBackend, build_backend
from aayu.replies.orchestrator import ReplyOrchestrator, SubmitOutcome
from aayu.sessions.profile import ProfileStore
from aayu.sessions.store import SessionStore

logger = logging.getLogger(__name__)


class ChatRuntime:
    """Wires the stores, the reply orchestrator and a shared event emitter."""

    def __init__(
        self,
        config: ChatConfig | None = None,
        backend: AssistantBackend | None = None,
        emitter: EventEmitter | None = None,
    ):
        self.config = config or ChatConfig()
        self.emitter = emitter or EventEmitter()
        self.store = SessionStore(
            self.emitter,
            placeholder_title=self.config.placeholder_title,
            title_max_chars=self.config.title_max_chars,
        )
        self.profile = ProfileStore(self.config.profile_name, emitter=self.emitter)
        self.orchestrator = ReplyOrchestrator(
            self.store,
            backend or build_backend(self.config),
            emitter=self.emitter,
            system_prompt=self.config.system_prompt,
            history_limit=self.config.history_limit,
            reply_timeout_s=self.config.reply_timeout_s,
        )
        logger.debug(
            f"Runtime ready (backend={type(self.orchestrator.backend).__name__}, "
            f"model={self.config.model})"
        )

    def set_backend(self, backend: AssistantBackend) -> None:
        self.orchestrator.backend = backend

    def current_chat(self) -> Chat | None:
        return self.store.get_selected()

    def current_profile(self) -> Profile:
        return self.profile.get_profile()

    async def send(self, text: str) -> SubmitOutcome:
        """Submit to the selected chat, creating one first if none is selected."""
        if not text.strip():
            return SubmitOutcome.EMPTY
        chat_id = self.store.selected_id
        if chat_id is None:
            chat_id = self.store.create_chat()
        return await self.orchestrator.submit(chat_id, text)

    def send_nowait(self, text: str) -> SubmitOutcome:
        """Start a reply in the selected chat and return without waiting for it.

        The reply is reported through ``ReplyCompletedEvent`` or
        ``ReplyFailedEvent``.
        """
        if not text.strip():
            return SubmitOutcome.EMPTY
        chat_id = self.store.selected_id
        if chat_id is None:
            chat_id = self.store.create_chat()
        outcome, _ = self.orchestrator.start_reply(chat_id, text)
        return outcome

    async def aclose(self) -> None:
        await self.orchestrator.aclose()

import logging
import threading

from aayu.models import ReplyState

logger = logging.getLogger(__name__)


class ReplyTracker:
    """Per-chat ``idle -> pending -> idle`` state for assistant replies.

    ``begin`` is an atomic test-and-set, which is what makes the
    one-reply-per-chat rule hold even when submissions race.
    """

    def __init__(self):
        self._pending: set[str] = set()
        self._lock = threading.Lock()

    def state(self, chat_id: str) -> ReplyState:
        with self._lock:
            return ReplyState.PENDING if chat_id in self._pending else ReplyState.IDLE

    def is_pending(self, chat_id: str) -> bool:
        return self.state(chat_id) is ReplyState.PENDING

    def begin(self, chat_id: str) -> bool:
        with self._lock:
            if chat_id in self._pending:
                return False
            self._pending.add(chat_id)
        logger.debug(f"Chat {chat_id}: idle -> pending")
        return True

    def finish(self, chat_id: str) -> bool:
        with self._lock:
            if chat_id not in self._pending:
                return False
            self._pending.discard(chat_id)
        logger.debug(f"Chat {chat_id}: pending -> idle")
        return True

    def pending(self) -> list[str]:
        with self._lock:
            return sorted(self._pending)

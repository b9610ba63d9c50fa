import logging
import threading

from common.events import EventEmitter, ProfileUpdatedEvent
from aayu.errors import InvalidInputError
from aayu.models import Profile

logger = logging.getLogger(__name__)


class ProfileStore:
    def __init__(self, name: str = "Guest", emitter: EventEmitter | None = None):
        self.emitter = emitter or EventEmitter()
        self._profile = Profile(name=name)
        self._lock = threading.Lock()

    def get_profile(self) -> Profile:
        with self._lock:
            return self._profile

    def set_name(self, new_name: str) -> Profile:
        name = (new_name or "").strip()
        if not name:
            raise InvalidInputError("Name must not be blank")
        with self._lock:
            self._profile = self._profile.model_copy(update={"name": name})
            profile = self._profile
        logger.info(f"Profile name set to '{name}'")
        self.emitter.emit(ProfileUpdatedEvent(name=name))
        return profile

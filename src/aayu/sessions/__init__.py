from aayu.sessions.profile import ProfileStore
from aayu.sessions.store import SessionStore

__all__ = ["ProfileStore", "SessionStore"]

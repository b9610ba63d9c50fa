from common import llm
from common.events import EventEmitter
from common.ids import generate_id, utc_now

__all__ = ["llm", "EventEmitter", "generate_id", "utc_now"]

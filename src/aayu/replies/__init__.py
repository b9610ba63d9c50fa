from aayu.replies.backends import AssistantBackend, DemoBackend, LiteLLMBackend, build_backend
from aayu.replies.orchestrator import ReplyOrchestrator, SubmitOutcome
from aayu.replies.tracker import ReplyTracker

__all__ = [
    "AssistantBackend",
    "DemoBackend",
    "LiteLLMBackend",
    "build_backend",
    "ReplyOrchestrator",
    "SubmitOutcome",
    "ReplyTracker",
]

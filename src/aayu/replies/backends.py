import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

from common import llm
from aayu.config import ChatConfig, ConfigError, resolve_model_alias
from aayu.history import latest_user_text

logger = logging.getLogger(__name__)

DEMO_REPLY_TEMPLATE = (
    'Thank you for your question: "{question}"\n\n'
    "This is a demo response. In a real deployment this assistant would "
    "answer using a language model backend.\n\n"
    "**Important Medical Disclaimer**: This information is for educational "
    "purposes only. Always consult qualified healthcare professionals for "
    "personalized medical advice."
)


@runtime_checkable
class AssistantBackend(Protocol):
    async def reply(self, messages: list[dict[str, Any]]) -> str:
        """Produce the assistant's next turn for a chat-completion message list."""
        ...


class DemoBackend:
    def __init__(self, delay_s: float = 1.5):
        self.delay_s = delay_s

    async def reply(self, messages: list[dict[str, Any]]) -> str:
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        return DEMO_REPLY_TEMPLATE.format(question=latest_user_text(messages))


class LiteLLMBackend:
    def __init__(
        self,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **params: Any,
    ):
        self.model = resolve_model_alias(model)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.params = params

    async def reply(self, messages: list[dict[str, Any]]) -> str:
        logger.debug(f"Calling {self.model} with {len(messages)} messages")
        response = await llm.acompletion(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            **self.params,
        )
        text = llm.response_text(response)
        if not text:
            raise RuntimeError(f"Empty response from {self.model}")
        return text


def build_backend(config: ChatConfig) -> AssistantBackend:
    if config.backend == "demo":
        return DemoBackend(delay_s=config.demo_delay_s)
    if config.backend == "litellm":
        return LiteLLMBackend(
            config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            **config.extra_params,
        )
    raise ConfigError(f"Unknown backend: {config.backend}")

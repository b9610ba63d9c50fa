import logging
import os
from dataclasses import dataclass, field

from aayu.models import PLACEHOLDER_TITLE, TITLE_MAX_CHARS

logger = logging.getLogger(__name__)

BACKENDS = ("demo", "litellm")

MODEL_ALIASES = {
    "sonnet": "claude-sonnet-4-20250514",
    "haiku": "claude-3-5-haiku-20241022",
    "4o": "gpt-4o",
    "mini": "gpt-4o-mini",
    "groq": "groq/llama-3.3-70b-versatile",
    "flash": "gemini/gemini-2.5-flash",
}

DEFAULT_SYSTEM_PROMPT = (
    "You are AayuSathi, a friendly health information assistant. "
    "Answer clearly and concisely. You are not a doctor: remind users to "
    "consult qualified healthcare professionals for personal medical advice."
)


class ConfigError(Exception):
    pass


def resolve_model_alias(name: str) -> str:
    return MODEL_ALIASES.get(name.lower(), name)


def get_optional_env(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class ChatConfig:
    model: str = "gpt-4o"
    backend: str = "demo"
    temperature: float = 0.7
    max_tokens: int = 1024
    reply_timeout_s: float = 60.0
    demo_delay_s: float = 1.5
    history_limit: int | None = 20
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    profile_name: str = "Guest"
    title_max_chars: int = TITLE_MAX_CHARS
    placeholder_title: str = PLACEHOLDER_TITLE
    extra_params: dict = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "ChatConfig":
        config = cls(
            model=resolve_model_alias(get_optional_env("AAYU_MODEL", cls.model)),
            backend=get_optional_env("AAYU_BACKEND", cls.backend).strip().lower(),
            temperature=_env_float("AAYU_TEMPERATURE", cls.temperature),
            max_tokens=_env_int("AAYU_MAX_TOKENS", cls.max_tokens),
            reply_timeout_s=_env_float("AAYU_REPLY_TIMEOUT", cls.reply_timeout_s),
            demo_delay_s=_env_float("AAYU_DEMO_DELAY", cls.demo_delay_s),
            history_limit=_env_int("AAYU_HISTORY_LIMIT", cls.history_limit),
            system_prompt=get_optional_env("AAYU_SYSTEM_PROMPT", cls.system_prompt),
            profile_name=get_optional_env("AAYU_PROFILE_NAME", cls.profile_name),
        )
        config.validate()
        logger.debug(f"Loaded config: model={config.model} backend={config.backend}")
        return config

    def validate(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigError(
                f"Unknown backend: {self.backend} (expected one of {', '.join(BACKENDS)})"
            )
        if not self.model.strip():
            raise ConfigError("model must not be empty")
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigError("temperature must be between 0 and 2")
        if self.max_tokens <= 0:
            raise ConfigError("max_tokens must be positive")
        if self.reply_timeout_s <= 0:
            raise ConfigError("reply_timeout_s must be positive")
        if self.demo_delay_s < 0:
            raise ConfigError("demo_delay_s must not be negative")
        if self.history_limit is not None and self.history_limit <= 0:
            raise ConfigError("history_limit must be positive")
        if self.title_max_chars <= 0:
            raise ConfigError("title_max_chars must be positive")
        if not self.profile_name.strip():
            raise ConfigError("profile_name must not be blank")

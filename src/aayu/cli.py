from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

from aayu.config import BACKENDS, ChatConfig, ConfigError, resolve_model_alias


def main() -> int:
    load_dotenv()
    return _main(sys.argv[1:])


class JsonFormatter(logging.Formatter):
    """One JSON object per line; records logged with ``extra={"chat_id": ...}`` keep it."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        chat_id = getattr(record, "chat_id", None)
        if chat_id is not None:
            payload["chat_id"] = chat_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


NOISY_LOGGERS = ("httpx", "httpcore", "LiteLLM")


def setup_logging(verbose: bool = False, quiet: bool = False, log_format: str = "text") -> None:
    """Configure logging for the chat front-end.

    Store and reply logs from ``aayu`` only show with ``--verbose``; by
    default only warnings reach the terminal so INFO lines do not
    interleave with the conversation, and ``--quiet`` keeps errors only.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    logging.basicConfig(level=level, handlers=[handler])

    logging.getLogger("aayu").setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aayu", description="AayuSathi - chat assistant")
    subparsers = parser.add_subparsers(dest="command", required=False)

    chat = subparsers.add_parser("chat", help="Start an interactive chat session")
    chat.add_argument(
        "--model",
        default=None,
        help="Model to use (supports aliases: sonnet, haiku, 4o, mini, groq, flash)",
    )
    chat.add_argument("--backend", choices=BACKENDS, default=None)
    chat.add_argument("--message", "-m", help="Single prompt (non-interactive)")
    chat.add_argument("--name", default=None, help="Display name for this session")
    chat.add_argument("--verbose", "-v", action="store_true")
    chat.add_argument("--quiet", "-q", action="store_true")
    chat.add_argument("--log-format", choices=["text", "json"], default="text")
    return parser


def _main(argv: list[str]) -> int:
    parser = _build_parser()
    if not argv or argv[0].startswith("-"):
        argv = ["chat", *argv]
    args = parser.parse_args(argv)
    if args.command == "chat":
        return _cmd_chat(args)
    parser.print_help()
    return 2


def _load_config(args) -> ChatConfig:
    config = ChatConfig.from_env()
    if args.model:
        config.model = resolve_model_alias(args.model)
        if args.backend is None:
            config.backend = "litellm"
    if args.backend:
        config.backend = args.backend
    if args.name:
        config.profile_name = args.name
    config.validate()
    return config


def _cmd_chat(args) -> int:
    from aayu.repl import ChatREPL, print_event
    from aayu.runtime import ChatRuntime

    setup_logging(args.verbose, args.quiet, args.log_format)
    logger = logging.getLogger(__name__)

    try:
        config = _load_config(args)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    runtime = ChatRuntime(config)

    if args.message:
        runtime.emitter.subscribe(print_event)

        async def _once() -> int:
            await runtime.send(args.message)
            chat = runtime.current_chat()
            await runtime.aclose()
            if chat is None or chat.last_message is None or chat.last_message.role != "assistant":
                return 1
            return 0

        return asyncio.run(_once())

    repl = ChatREPL(runtime)
    try:
        asyncio.run(repl.run())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    return 0

import asyncio
import json
import logging

import pytest

from aayu import cli
from aayu.builtins import BuiltinCommands
from aayu.config import ChatConfig
from aayu.repl import ChatREPL, print_event
from aayu.router import parse_input
from aayu.runtime import ChatRuntime
from common.events import ChatDeletedEvent, ReplyFailedEvent


@pytest.fixture
def runtime(scripted_backend):
    return ChatRuntime(ChatConfig(), backend=scripted_backend)


def test_parse_input_routes_commands_and_messages(runtime):
    commands = BuiltinCommands(runtime).list_commands()

    assert parse_input("  hello there ", commands).kind == "message"
    assert parse_input("hello there", commands).text == "hello there"
    assert parse_input("   ", commands).kind == "empty"

    parsed = parse_input("/SELECT  2", commands)
    assert (parsed.kind, parsed.command, parsed.text) == ("command", "select", "2")

    unknown = parse_input("/nope arg", commands)
    assert (unknown.kind, unknown.command) == ("unknown", "nope")


def test_parse_input_double_slash_sends_literal_text():
    parsed = parse_input("//new is a command name", ["new"])
    assert parsed.kind == "message"
    assert parsed.text == "/new is a command name"


def test_new_and_chats_listing(runtime, capsys):
    builtins = BuiltinCommands(runtime)

    assert builtins.handle("chats", "") is True
    assert "No chats yet" in capsys.readouterr().out

    builtins.handle("new", "")
    builtins.handle("chats", "")
    out = capsys.readouterr().out
    assert runtime.store.selected_id in out
    assert "New Chat" in out


def test_select_by_position(runtime):
    builtins = BuiltinCommands(runtime)
    older = runtime.store.create_chat()
    runtime.store.create_chat()

    builtins.handle("select", "2")

    assert runtime.store.selected_id == older


def test_select_unknown_prints_error(runtime, capsys):
    BuiltinCommands(runtime).handle("select", "zzz")
    assert "not found" in capsys.readouterr().out


def test_delete_defaults_to_selected(runtime):
    chat_id = runtime.store.create_chat()

    BuiltinCommands(runtime).handle("delete", "")

    assert not runtime.store.has_chat(chat_id)
    assert runtime.current_chat() is None


def test_name_command(runtime, capsys):
    builtins = BuiltinCommands(runtime)

    builtins.handle("name", "  Kiran ")
    assert runtime.current_profile().name == "Kiran"

    builtins.handle("name", "")
    assert "Current name: Kiran" in capsys.readouterr().out


def test_quit_stops_loop(runtime):
    assert BuiltinCommands(runtime).handle("quit", "") is False


def test_print_event_messages(capsys):
    print_event(ChatDeletedEvent(chat_id="c1"))
    print_event(ReplyFailedEvent(chat_id="c1", error="boom"))
    out = capsys.readouterr().out
    assert "Chat deleted" in out
    assert "boom" in out


@pytest.mark.asyncio
async def test_repl_runs_scripted_session(runtime, monkeypatch, capsys):
    inputs = iter(["", "/new", "How do I sleep better?", "/history", "/quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))

    await ChatREPL(runtime).run()

    chat = runtime.current_chat()
    assert chat.title == "How do I sleep better?"
    assert len(chat.messages) == 2
    out = capsys.readouterr().out
    assert "echo: How do I sleep better?" in out
    assert "Goodbye" in out


def test_setup_logging_json(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))

    cli.setup_logging(log_format="json")

    assert calls["level"] == logging.WARNING
    assert isinstance(calls["handlers"][0].formatter, cli.JsonFormatter)


def test_json_formatter_output():
    record = logging.LogRecord("aayu.test", logging.WARNING, __file__, 1, "hello %s", ("x",), None)
    line = cli.JsonFormatter().format(record)
    assert '"message": "hello x"' in line
    assert '"level": "WARNING"' in line


def test_single_message_mode(monkeypatch, capsys):
    monkeypatch.setenv("AAYU_DEMO_DELAY", "0")
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)

    code = cli._main(["chat", "--backend", "demo", "-m", "Is walking good exercise?"])

    assert code == 0
    assert "Is walking good exercise?" in capsys.readouterr().out


def test_bad_backend_env_is_config_error(monkeypatch):
    monkeypatch.setenv("AAYU_BACKEND", "nope")
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)

    assert cli._main(["chat", "-m", "hi"]) == 1


def test_json_formatter_includes_chat_id():
    record = logging.LogRecord("aayu.replies", logging.WARNING, __file__, 1, "failed", (), None)
    record.chat_id = "abc123"

    payload = json.loads(cli.JsonFormatter().format(record))

    assert payload["chat_id"] == "abc123"
    assert payload["logger"] == "aayu.replies"


def test_setup_logging_levels(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))

    cli.setup_logging(verbose=True)
    assert calls["level"] == logging.DEBUG
    assert logging.getLogger("aayu").level == logging.DEBUG

    cli.setup_logging(quiet=True)
    assert calls["level"] == logging.ERROR
    assert logging.getLogger("LiteLLM").level == logging.WARNING

    cli.setup_logging()
    assert logging.getLogger("aayu").level == logging.WARNING


@pytest.mark.asyncio
async def test_repl_keeps_reading_input_while_reply_pending(gated_backend, monkeypatch, capsys):
    runtime = ChatRuntime(ChatConfig(), backend=gated_backend)
    loop = asyncio.get_running_loop()
    lines = iter(["hello", "/chats", "again", "/quit"])
    pending_at_read = []

    def fake_input(prompt=""):
        line = next(lines)
        chat_id = runtime.store.selected_id
        pending_at_read.append(chat_id is not None and runtime.orchestrator.is_pending(chat_id))
        if line == "/quit":
            loop.call_soon_threadsafe(gated_backend.release)
        return line

    monkeypatch.setattr("builtins.input", fake_input)

    await ChatREPL(runtime).run()

    assert pending_at_read == [False, True, True, True]
    out = capsys.readouterr().out
    assert "(waiting for reply)" in out
    assert "Still waiting for the previous reply" in out
    chat = runtime.current_chat()
    assert [(m.role, m.content) for m in chat.messages] == [("user", "hello"), ("assistant", "ok")]
    assert runtime.orchestrator.pending_chats() == []

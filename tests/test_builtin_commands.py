"""Tests for the command registry and the built-in commands."""

from unittest.mock import MagicMock

import pytest

from vibesh.cli.builtin_commands import (
    ContextCommand,
    ExitCommand,
    HelpCommand,
    HistoryCommand,
    ModeCommand,
    create_builtin_registry,
)
from vibesh.cli.commands import Command, CommandRegistry
from vibesh.pipeline.models import LineResult, LineStatus, Mode
from vibesh.pipeline.session import Session


class MockCommand(Command):
    """Mock command for testing."""

    def __init__(
        self,
        name: str = "test",
        aliases: list[str] | None = None,
        takes_args: bool = False,
    ):
        super().__init__(name, "Test command", aliases, takes_args=takes_args)
        self.last_args = None

    def execute(self, args, router, session) -> LineResult:
        self.last_args = args
        return LineResult(LineStatus.BUILTIN, message="ran")


@pytest.fixture
def router() -> MagicMock:
    router = MagicMock()
    router.commands = create_builtin_registry()
    router.context_provider = lambda: "Current directory: /work\n\nSummary: 0 directories, 0 files\n"
    return router


class TestCommandRegistry:
    def test_empty_registry(self):
        registry = CommandRegistry()

        assert registry.all_commands() == []
        assert registry.get("nonexistent") is None
        assert registry.resolve("anything") is None

    def test_aliases(self):
        registry = CommandRegistry()
        cmd = MockCommand("exit", aliases=["quit"])
        registry.register(cmd)

        assert registry.get("exit") is cmd
        assert registry.get("quit") is cmd
        assert registry.all_commands() == [cmd]
        assert sorted(registry.get_completions()) == ["exit", "quit"]

    def test_resolve_splits_arguments(self):
        registry = CommandRegistry()
        cmd = MockCommand("mode", takes_args=True)
        registry.register(cmd)

        assert registry.resolve("mode   retrieval-yolo ") == (cmd, "retrieval-yolo")
        assert registry.resolve("mode") == (cmd, "")
        assert registry.resolve("modes") is None
        assert registry.resolve("") is None

    def test_commands_without_args_match_whole_line_only(self):
        registry = CommandRegistry()
        cmd = MockCommand("exit", aliases=["quit"])
        registry.register(cmd)

        assert registry.resolve("  exit  ") == (cmd, "")
        assert registry.resolve("quit") == (cmd, "")
        assert registry.resolve("exit the vim swap files cleanup") is None
        assert registry.resolve("quit all running containers") is None

    def test_builtin_argument_policy(self):
        registry = create_builtin_registry()

        assert registry.resolve("mode ai")[1] == "ai"
        for line in ["help me compress this folder", "history of git commits", "context switch count"]:
            assert registry.resolve(line) is None

    def test_usage_defaults_to_name(self):
        assert MockCommand("history").usage == "history"

    def test_builtin_registry(self):
        names = [cmd.name for cmd in create_builtin_registry().all_commands()]

        assert names == ["exit", "mode", "history", "context", "help"]


class TestExitCommand:
    def test_requests_exit(self, router):
        session = Session()

        result = ExitCommand().execute("", router, session)

        assert result.status is LineStatus.EXIT
        assert result.message == "Goodbye!"
        assert session.exit_requested


class TestModeCommand:
    def test_show_current(self, router):
        session = Session(mode=Mode.RETRIEVAL_YOLO)

        result = ModeCommand().execute("", router, session)

        assert result.status is LineStatus.BUILTIN
        assert result.message.splitlines() == [
            "Current mode: retrieval-yolo",
            "Available modes: direct, retrieval, generative, retrieval-yolo, generative-yolo",
        ]
        assert session.mode is Mode.RETRIEVAL_YOLO

    def test_switch(self, router):
        session = Session()

        result = ModeCommand().execute("rag", router, session)

        assert result.message == "Mode switched to: retrieval"
        assert session.mode is Mode.RETRIEVAL

    def test_invalid(self, router):
        session = Session(mode=Mode.GENERATIVE)

        result = ModeCommand().execute("fast", router, session)

        assert result.status is LineStatus.FAILED
        assert result.error.splitlines()[0] == "Invalid mode: fast"
        assert session.mode is Mode.GENERATIVE


class TestHistoryCommand:
    def test_numbered_from_one(self, router):
        session = Session(history=["ls", "list files"])

        result = HistoryCommand().execute("", router, session)

        assert result.message.splitlines() == ["Command history:", "1: ls", "2: list files"]

    def test_empty(self, router):
        result = HistoryCommand().execute("", router, Session())

        assert result.message == "Command history:"


class TestContextCommand:
    def test_shows_snapshot(self, router):
        result = ContextCommand().execute("", router, Session())

        assert result.message.startswith("Current directory: /work")
        assert not result.message.endswith("\n")


class TestHelpCommand:
    def test_lists_builtins_and_modes(self, router):
        result = HelpCommand().execute("", router, Session())

        for name in ["exit", "mode [name]", "history", "context", "help"]:
            assert name in result.message
        for mode in Mode.names():
            assert mode in result.message
        assert "Popular retrieval commands" not in result.message

    @pytest.mark.parametrize("mode", [Mode.RETRIEVAL, Mode.RETRIEVAL_YOLO])
    def test_popular_intents_in_retrieval(self, router, mode):
        result = HelpCommand().execute("", router, Session(mode=mode))

        assert "Popular retrieval commands:" in result.message
        assert "check git status" in result.message

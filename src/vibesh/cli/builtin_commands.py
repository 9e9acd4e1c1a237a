"""Built-in commands: exit, mode, history, context, help."""

from __future__ import annotations

from typing import TYPE_CHECKING

from vibesh.cli.commands import Command, CommandRegistry
from vibesh.errors import InvalidModeError
from vibesh.logging import Loggers, bind_context
from vibesh.pipeline.models import Chain, LineResult, LineStatus, Mode
from vibesh.pipeline.retrieval import POPULAR_INTENTS

if TYPE_CHECKING:
    from vibesh.cli.router import ModeRouter
    from vibesh.pipeline.session import Session

logger = Loggers.cli()

MODE_DESCRIPTIONS = {
    Mode.DIRECT: "Commands are executed directly in the shell",
    Mode.RETRIEVAL: "Commands are matched against a knowledge base with AI fallback",
    Mode.GENERATIVE: "Natural language is converted to shell commands using AI",
    Mode.RETRIEVAL_YOLO: "Like retrieval, but never asks for confirmation",
    Mode.GENERATIVE_YOLO: "Like generative, but never asks for confirmation",
}


class ExitCommand(Command):
    """Exit the shell."""

    def __init__(self) -> None:
        super().__init__(
            name="exit",
            description="Exit the shell",
            aliases=["quit"],
        )

    def execute(self, args: str, router: ModeRouter, session: Session) -> LineResult:
        session.exit_requested = True
        return LineResult(LineStatus.EXIT, message="Goodbye!")


class ModeCommand(Command):
    """Show or switch the processing mode."""

    def __init__(self) -> None:
        super().__init__(
            name="mode",
            description="Switch between processing modes",
            usage="mode [name]",
            takes_args=True,
        )

    def execute(self, args: str, router: ModeRouter, session: Session) -> LineResult:
        available = ", ".join(Mode.names())
        if not args:
            return LineResult(
                LineStatus.BUILTIN,
                message=f"Current mode: {session.mode.value}\nAvailable modes: {available}",
            )

        try:
            mode = Mode.parse(args)
        except InvalidModeError as e:
            return LineResult(
                LineStatus.FAILED,
                error=f"{e.message}\nAvailable modes: {available}",
            )

        previous = session.switch_mode(mode)
        bind_context(mode=mode.value)
        logger.info("mode_switched", previous=previous.value)
        return LineResult(LineStatus.BUILTIN, message=f"Mode switched to: {mode.value}")


class HistoryCommand(Command):
    """Display the session history."""

    def __init__(self) -> None:
        super().__init__(
            name="history",
            description="Display command history",
        )

    def execute(self, args: str, router: ModeRouter, session: Session) -> LineResult:
        lines = ["Command history:"]
        lines.extend(f"{idx}: {line}" for idx, line in enumerate(session.history, start=1))
        return LineResult(LineStatus.BUILTIN, message="\n".join(lines))


class ContextCommand(Command):
    """Show the directory snapshot the model receives."""

    def __init__(self) -> None:
        super().__init__(
            name="context",
            description="Show current directory context",
        )

    def execute(self, args: str, router: ModeRouter, session: Session) -> LineResult:
        return LineResult(LineStatus.BUILTIN, message=router.context_provider().rstrip("\n"))


class HelpCommand(Command):
    """Display help information."""

    def __init__(self) -> None:
        super().__init__(
            name="help",
            description="Display this help message",
        )

    def execute(self, args: str, router: ModeRouter, session: Session) -> LineResult:
        lines = ["Vibesh Help:", "---------------", "Built-in commands:"]
        for cmd in router.commands.all_commands():
            lines.append(f"  {cmd.usage:<14} - {cmd.description}")

        lines.append("")
        lines.append("Modes:")
        for mode in Mode:
            lines.append(f"  {mode.value:<16} - {MODE_DESCRIPTIONS[mode]}")

        if session.mode.chain is Chain.RETRIEVAL:
            lines.append("")
            lines.append("Popular retrieval commands:")
            for intent, description in POPULAR_INTENTS.items():
                lines.append(f"  {intent:<24} - {description}")

        return LineResult(LineStatus.BUILTIN, message="\n".join(lines))


def create_builtin_registry() -> CommandRegistry:
    """Registry holding every built-in command."""
    registry = CommandRegistry()
    registry.register(ExitCommand())
    registry.register(ModeCommand())
    registry.register(HistoryCommand())
    registry.register(ContextCommand())
    registry.register(HelpCommand())
    return registry

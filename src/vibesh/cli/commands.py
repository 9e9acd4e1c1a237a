"""Built-in command base class and registry.

Built-ins are recognized by the whole input line, or by its first word
for commands that take arguments. They are handled locally: they never
enter a processor chain and never reach the executor.

Example of creating a custom built-in:

    from vibesh.cli.commands import Command

    class PwdCommand(Command):
        '''Show the working directory.'''

        def __init__(self):
            super().__init__(
                name="pwd",
                description="Show the working directory",
                usage="pwd",
            )

        def execute(self, args, router, session):
            return LineResult(LineStatus.BUILTIN, message=str(Path.cwd()))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vibesh.cli.router import ModeRouter
    from vibesh.pipeline.models import LineResult
    from vibesh.pipeline.session import Session


class Command(ABC):
    """Base class for built-in commands.

    Subclass this and override execute() to implement behavior.
    """

    def __init__(
        self,
        name: str,
        description: str,
        aliases: list[str] | None = None,
        usage: str | None = None,
        takes_args: bool = False,
    ) -> None:
        """Initialize the command.

        Args:
            name: Command name (the first word of the line)
            description: Short description for help output
            aliases: Alternative names for the command
            usage: Usage string showing syntax (e.g., "mode [name]")
            takes_args: Whether words may follow the name. Commands without
                arguments only match a line that is exactly their name.
        """
        self.name = name
        self.description = description
        self.aliases = aliases or []
        self.usage = usage or name
        self.takes_args = takes_args

    @abstractmethod
    def execute(self, args: str, router: ModeRouter, session: Session) -> LineResult:
        """Execute the command.

        Args:
            args: Everything after the command name, stripped
            router: The router handling the line
            session: The session the line belongs to

        Returns:
            LineResult describing the outcome
        """


class CommandRegistry:
    """Registry for built-in commands.

    Handles registration and lookup by name or alias.
    """

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(self, command: Command) -> None:
        """Register a command and its aliases."""
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Command | None:
        """Get a command by name or alias."""
        return self._commands.get(name)

    def resolve(self, line: str) -> tuple[Command, str] | None:
        """Split a line into a registered command and its arguments.

        A line such as "help me find big files" is not a built-in: only
        commands that take arguments match on the first word alone.

        Returns:
            (command, args) if the line invokes a built-in, else None
        """
        parts = line.strip().split(maxsplit=1)
        if not parts:
            return None
        command = self.get(parts[0])
        if command is None:
            return None
        if len(parts) == 1:
            return command, ""
        if not command.takes_args:
            return None
        return command, parts[1].strip()

    def all_commands(self) -> list[Command]:
        """All unique commands (excluding aliases), in registration order."""
        seen: set[str] = set()
        commands: list[Command] = []
        for cmd in self._commands.values():
            if cmd.name not in seen:
                seen.add(cmd.name)
                commands.append(cmd)
        return commands

    def get_completions(self) -> list[str]:
        """All command names and aliases for auto-completion."""
        return list(self._commands.keys())

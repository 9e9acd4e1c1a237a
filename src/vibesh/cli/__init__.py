"""Terminal front-end: built-in commands, mode routing and the shell app."""

from vibesh.cli.commands import Command, CommandRegistry
from vibesh.cli.builtin_commands import create_builtin_registry
from vibesh.cli.router import ModeRouter
from vibesh.cli.app import ShellApp

__all__ = [
    "Command",
    "CommandRegistry",
    "ModeRouter",
    "ShellApp",
    "create_builtin_registry",
]

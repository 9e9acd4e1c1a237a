"""Per-session state: the active mode and the input history.

A Session is passed to every dispatch call instead of living in module
globals, so independent sessions can coexist. Mode and history are only
mutated between lines, never during one.
"""

from dataclasses import dataclass, field

from vibesh.pipeline.models import Mode


@dataclass
class Session:
    """State shared by all lines of one interactive session or script."""

    mode: Mode = Mode.DIRECT
    history: list[str] = field(default_factory=list)
    exit_requested: bool = False

    def record(self, line: str) -> None:
        """Append a submitted line. History is never trimmed."""
        self.history.append(line)

    def prior_history(self) -> tuple[str, ...]:
        """Lines submitted before the most recent one."""
        return tuple(self.history[:-1])

    def switch_mode(self, mode: Mode) -> Mode:
        """Change the active mode and return the previous one."""
        previous = self.mode
        self.mode = mode
        return previous

"""Data models for the line-processing pipeline.

Provides the candidate action produced by every processor chain, the
closed set of shell modes, knowledge base entries and the result types
returned by the executor and the router.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from vibesh.errors import ExecutionError, InvalidModeError


class Chain(Enum):
    """Processor chain a mode routes input through."""

    DIRECT = "direct"
    RETRIEVAL = "retrieval"
    GENERATIVE = "generative"


class Mode(Enum):
    """Active interpretation strategy for input lines."""

    DIRECT = "direct"
    RETRIEVAL = "retrieval"
    GENERATIVE = "generative"
    RETRIEVAL_YOLO = "retrieval-yolo"
    GENERATIVE_YOLO = "generative-yolo"

    @property
    def chain(self) -> Chain:
        """Processor chain for this mode."""
        return _MODE_CHAINS[self]

    @property
    def is_yolo(self) -> bool:
        """Yolo modes never ask for confirmation."""
        return self in (Mode.RETRIEVAL_YOLO, Mode.GENERATIVE_YOLO)

    @classmethod
    def names(cls) -> list[str]:
        """Canonical mode names, in declaration order."""
        return [mode.value for mode in cls]

    @classmethod
    def parse(cls, name: str) -> Mode:
        """Resolve a user-supplied mode name.

        Accepts canonical names case-insensitively, with ``_`` for ``-``,
        plus the short aliases ``ai`` and ``rag``.

        Raises:
            InvalidModeError: If the name is not a known mode
        """
        normalized = name.strip().lower().replace("_", "-")
        normalized = _MODE_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidModeError(
                f"Invalid mode: {name}",
                details={"available": cls.names()},
            ) from None


_MODE_CHAINS = {
    Mode.DIRECT: Chain.DIRECT,
    Mode.RETRIEVAL: Chain.RETRIEVAL,
    Mode.RETRIEVAL_YOLO: Chain.RETRIEVAL,
    Mode.GENERATIVE: Chain.GENERATIVE,
    Mode.GENERATIVE_YOLO: Chain.GENERATIVE,
}

_MODE_ALIASES = {
    "ai": "generative",
    "ai-yolo": "generative-yolo",
    "rag": "retrieval",
    "rag-yolo": "retrieval-yolo",
}


@dataclass(frozen=True)
class KnowledgeEntry:
    """An intent phrase and the command template it maps to.

    Templates may contain placeholder tokens such as ``NAME``, ``FILE``
    or ``PORT`` that are run as-is.
    """

    intent: str
    template: str


@dataclass
class ActionCandidate:
    """A proposed, not yet executed command with its risk metadata.

    ``command`` is either an argv list (``shell=False``) or a single raw
    string to be interpreted by the shell (``shell=True``).
    """

    explanation: str
    command: list[str]
    risk_score: int = 0
    reads_data: bool = False
    writes_data: bool = False
    source: Chain = Chain.DIRECT
    shell: bool = False

    @classmethod
    def from_shell_text(
        cls,
        text: str,
        explanation: str,
        source: Chain,
    ) -> ActionCandidate:
        """Wrap raw shell text as a candidate."""
        return cls(
            explanation=explanation,
            command=[text] if text.strip() else [],
            source=source,
            shell=True,
        )

    @property
    def display(self) -> str:
        """The command as shown to the user."""
        return " ".join(self.command)

    @property
    def risk_summary(self) -> str:
        """One-line risk description."""
        return (
            f"Risk: {self.risk_score}/10 | "
            f"Read: {str(self.reads_data).lower()} | "
            f"Write: {str(self.writes_data).lower()}"
        )


@dataclass
class ExecutionResult:
    """Outcome of running a command on the host interpreter.

    Attributes:
        output: Combined stdout/stderr captured, even on failure.
        return_code: Exit status (-1 when the process never ran or was killed).
        duration_ms: Wall time spent in the child process.
        error: Error message if execution failed.
        executed: Whether a process was spawned at all.
    """

    output: bytes
    return_code: int
    duration_ms: int = 0
    error: str | None = None
    executed: bool = True

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        """Output decoded for display."""
        return self.output.decode("utf-8", errors="replace")

    def to_error(self) -> ExecutionError | None:
        """Structured error for a failed run, or None on success."""
        if self.error is None:
            return None
        return ExecutionError(
            self.error,
            output=self.output,
            details={"return_code": self.return_code, "executed": self.executed},
        )


class LineStatus(Enum):
    """How the router disposed of one input line."""

    EMPTY = "empty"
    BUILTIN = "builtin"
    INFO = "info"
    EXECUTED = "executed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXIT = "exit"


@dataclass
class LineResult:
    """Everything the front-end needs to report one processed line."""

    status: LineStatus
    message: str = ""
    candidate: ActionCandidate | None = None
    output: str = ""
    error: str | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is not LineStatus.FAILED

"""Mode-based dispatch of input lines.

The router decides, for each line, whether it is a built-in or which
processor chain produces the candidate, then pipes the candidate through
classification, the confirmation gate and the executor:

    direct      -> executor (raw text through the shell, no gating)
    retrieval   -> matcher -> classifier -> gate -> executor
                   (no match: generative chain with the same yolo flag)
    generative  -> model -> gate (self-reported risk) -> executor

Every pipeline error is turned into a line-scoped failure. The session
always continues, and the failed line stays in history.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from vibesh.cli.builtin_commands import create_builtin_registry
from vibesh.cli.commands import CommandRegistry
from vibesh.config import VibeshSettings, get_settings
from vibesh.constants import MISSING_API_KEY_MESSAGE, truncate
from vibesh.context import directory_context
from vibesh.errors import ConfigurationError, VibeshError
from vibesh.logging import Loggers
from vibesh.pipeline.executor import Executor
from vibesh.pipeline.gate import ConfirmationGate, Confirmer
from vibesh.pipeline.models import (
    ActionCandidate,
    Chain,
    LineResult,
    LineStatus,
    Mode,
)
from vibesh.pipeline.retrieval import RetrievalMatcher
from vibesh.pipeline.risk import RiskClassifier
from vibesh.pipeline.session import Session

if TYPE_CHECKING:
    from vibesh.pipeline.generative import GenerativeProcessor

logger = Loggers.cli()

NO_MATCH_MESSAGE = "No matching command found and AI fallback not available."
CANCELLED_MESSAGE = "cancelled by user"


def _decline(_request: object) -> str | None:
    """Confirmer used when nobody can answer: every request is declined."""
    return None


class ModeRouter:
    """Routes lines through the processor chain selected by the session mode.

    Example:
        router = ModeRouter.from_settings(confirmer=ask_user)
        session = Session(mode=Mode.RETRIEVAL)
        result = router.dispatch("list files", session)
    """

    def __init__(
        self,
        *,
        executor: Executor | None = None,
        matcher: RetrievalMatcher | None = None,
        classifier: RiskClassifier | None = None,
        gate: ConfirmationGate | None = None,
        generative: GenerativeProcessor | None = None,
        confirmer: Confirmer = _decline,
        context_provider: Callable[[], str] = directory_context,
        commands: CommandRegistry | None = None,
    ) -> None:
        """Initialize the router.

        Args:
            executor: Runs approved candidates
            matcher: Knowledge base lookup for retrieval modes
            classifier: Risk rules for retrieval candidates
            gate: Confirmation policy
            generative: Model-backed processor; None when unconfigured
            confirmer: Asks the user about risky candidates
            context_provider: Directory snapshot for the context built-in
            commands: Built-in commands
        """
        self.executor = executor or Executor()
        self.matcher = matcher or RetrievalMatcher()
        self.classifier = classifier or RiskClassifier()
        self.gate = gate or ConfirmationGate()
        self.generative = generative
        self.confirmer = confirmer
        self.context_provider = context_provider
        self.commands = commands or create_builtin_registry()

    @classmethod
    def from_settings(
        cls,
        settings: VibeshSettings | None = None,
        **kwargs: object,
    ) -> ModeRouter:
        """Build a router from settings.

        A missing API key is not fatal: the generative chain is left
        unconfigured and reports an informational message instead.
        """
        settings = settings or get_settings()

        generative = kwargs.pop("generative", None)
        if generative is None:
            from vibesh.pipeline.generative import GenerativeProcessor

            try:
                generative = GenerativeProcessor.from_settings(settings)
            except ConfigurationError as e:
                logger.warning("generative_unavailable", **e.to_dict())

        kwargs.setdefault(
            "executor",
            Executor(
                shell_executable=settings.shell_executable,
                timeout_seconds=settings.exec_timeout_seconds,
            ),
        )
        kwargs.setdefault("gate", ConfirmationGate(threshold=settings.confirm_threshold))
        return cls(generative=generative, **kwargs)

    def dispatch(self, line: str, session: Session) -> LineResult:
        """Process one input line.

        Args:
            line: Raw input line
            session: Session owning the mode and history

        Returns:
            LineResult for the front-end to render
        """
        line = line.strip()
        if not line:
            return LineResult(LineStatus.EMPTY)

        builtin = self.commands.resolve(line)
        if builtin is not None:
            command, args = builtin
            logger.debug("builtin_command", command=command.name, args=args)
            return command.execute(args, self, session)

        session.record(line)
        logger.info("line_dispatched", mode=session.mode.value, line=truncate(line))

        try:
            return self._run_chain(line, session)
        except VibeshError as e:
            logger.warning("line_failed", line=truncate(line), **e.to_dict())
            return LineResult(LineStatus.FAILED, error=str(e), metadata={"code": e.error_code})

    def _run_chain(self, line: str, session: Session) -> LineResult:
        chain = session.mode.chain
        if chain is Chain.DIRECT:
            return self._run_direct(line)
        if chain is Chain.RETRIEVAL:
            return self._run_retrieval(line, session)
        return self._run_generative(line, session)

    def _run_direct(self, line: str) -> LineResult:
        candidate = ActionCandidate.from_shell_text(
            line,
            explanation="Direct shell command",
            source=Chain.DIRECT,
        )
        return self._execute(candidate)

    def _run_retrieval(self, line: str, session: Session) -> LineResult:
        entry = self.matcher.match(line)
        if entry is None:
            if self.generative is None:
                return LineResult(LineStatus.INFO, message=NO_MATCH_MESSAGE)
            return self._run_generative(line, session)

        candidate = ActionCandidate.from_shell_text(
            entry.template,
            explanation=f"Matched '{line}' to command: {entry.template}",
            source=Chain.RETRIEVAL,
        )
        assessment = self.classifier.classify(entry.template)
        candidate.risk_score = assessment.score
        candidate.reads_data = assessment.reads
        candidate.writes_data = assessment.writes
        return self._gate_and_execute(candidate, session.mode)

    def _run_generative(self, line: str, session: Session) -> LineResult:
        if self.generative is None:
            return LineResult(LineStatus.INFO, message=MISSING_API_KEY_MESSAGE)

        candidate = self.generative.process(line, session.prior_history())
        return self._gate_and_execute(candidate, session.mode)

    def _gate_and_execute(self, candidate: ActionCandidate, mode: Mode) -> LineResult:
        if not self.gate.check(candidate, mode, self.confirmer):
            return LineResult(
                LineStatus.CANCELLED,
                message=CANCELLED_MESSAGE,
                candidate=candidate,
            )
        return self._execute(candidate)

    def _execute(self, candidate: ActionCandidate) -> LineResult:
        result = self.executor.run_candidate(candidate)
        error = result.to_error()
        if error is not None:
            logger.info("execution_failed", **error.to_dict())
            return LineResult(
                LineStatus.FAILED,
                candidate=candidate,
                output=result.text,
                error=error.message,
                metadata={"code": error.error_code, "return_code": result.return_code},
            )
        return LineResult(
            LineStatus.EXECUTED,
            candidate=candidate,
            output=result.text,
            metadata={"return_code": result.return_code},
        )

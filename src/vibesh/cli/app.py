"""Terminal front-end for vibesh.

Three ways to feed lines into the router, all sharing one rendering path:

1. Interactive: prompt_toolkit PromptSession with a coloured mode prompt
2. Script file: ``vibesh script.vsh`` (shebang and comments skipped)
3. Piped: lines read from a non-TTY standard input
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import IO, TextIO

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.shortcuts import prompt
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from vibesh import __version__
from vibesh.cli.router import ModeRouter
from vibesh.config import VibeshSettings, get_settings
from vibesh.constants import HIGH_RISK_SCORE, MEDIUM_RISK_SCORE
from vibesh.logging import Loggers, bind_context
from vibesh.pipeline.gate import ConfirmationRequest
from vibesh.pipeline.models import ActionCandidate, Chain, LineResult, LineStatus, Mode
from vibesh.pipeline.session import Session

logger = Loggers.cli()

CONFIRM_PROMPT = "Proceed? [y/N] "
TTY_PATH = "/dev/tty"


def risk_style(score: int) -> str:
    """Colour band for a risk score."""
    if score >= HIGH_RISK_SCORE:
        return "red"
    if score >= MEDIUM_RISK_SCORE:
        return "yellow"
    return "green"


# === Completion ===


class BuiltinCompleter(Completer):
    """Completes built-in names, and mode names after ``mode``."""

    def __init__(self, commands: list[str], modes: list[str]) -> None:
        """Initialize with built-in names and mode names.

        Args:
            commands: Built-in command names and aliases
            modes: Canonical mode names
        """
        self.commands = sorted(commands)
        self.modes = modes

    def get_completions(self, document: Document, complete_event):
        text = document.text_before_cursor

        if text.startswith("mode "):
            partial = text[len("mode "):].lower()
            for mode in self.modes:
                if mode.startswith(partial):
                    yield Completion(mode, start_position=-len(partial))
            return

        # Only the first word of a line can be a built-in
        if " " in text:
            return
        for cmd in self.commands:
            if cmd.startswith(text):
                yield Completion(cmd, start_position=-len(text))


# === Application ===


class ShellApp:
    """The vibesh shell.

    Owns the console, the router and the confirmer; each front-end
    creates one Session and feeds lines to process_line().
    """

    def __init__(
        self,
        settings: VibeshSettings | None = None,
        router: ModeRouter | None = None,
        console: Console | None = None,
        error_console: Console | None = None,
    ) -> None:
        """Initialize the application.

        Args:
            settings: Optional settings override
            router: Optional router (built from settings by default)
            console: Console for results
            error_console: Console for per-line errors in batch front-ends
        """
        self._settings = settings or get_settings()
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)
        self.router = router or ModeRouter.from_settings(
            self._settings,
            confirmer=self.confirm,
        )
        self._prompt_session: PromptSession | None = None
        self._interactive = False

    @property
    def settings(self) -> VibeshSettings:
        return self._settings

    # --- Confirmation ---

    def confirm(self, request: ConfirmationRequest) -> str | None:
        """Show a risky candidate and read the user's answer.

        Interactive sessions ask through the prompt; batch front-ends read
        the controlling terminal, and decline when there is none.
        """
        self.console.print(
            Panel(
                Text.assemble(
                    (request.explanation + "\n", "bold"),
                    (request.risk_summary + "\n", risk_style(request.risk_score)),
                    ("Command: ", "dim"),
                    request.command,
                ),
                title="Confirmation required",
                border_style="red",
            )
        )

        # Answers never enter the line history
        if self._interactive:
            try:
                return prompt(CONFIRM_PROMPT)
            except (EOFError, KeyboardInterrupt):
                return None

        return self._read_tty_answer()

    def _read_tty_answer(self) -> str | None:
        try:
            with open(TTY_PATH, "r+") as tty:
                tty.write(CONFIRM_PROMPT)
                tty.flush()
                return tty.readline()
        except OSError:
            logger.info("confirmation_unavailable", reason="no controlling terminal")
            return None

    # --- Rendering ---

    def render_candidate(self, candidate: ActionCandidate) -> None:
        """Show explanation, risk and command for an interpreted line."""
        if candidate.source is Chain.DIRECT:
            return
        self.console.print(candidate.explanation, markup=False)
        self.console.print(candidate.risk_summary, style=risk_style(candidate.risk_score))
        self.console.print(Text.assemble(("Command: ", "dim"), candidate.display))

    def render(self, result: LineResult, errors: Console | None = None) -> None:
        """Print a line result.

        Args:
            result: Result returned by the router
            errors: Console for error text (defaults to the main console)
        """
        errors = errors or self.console

        if result.status is LineStatus.EMPTY:
            return

        if result.candidate is not None:
            self.render_candidate(result.candidate)
        if result.output:
            self.console.out(result.output, end="" if result.output.endswith("\n") else "\n")

        if result.status is LineStatus.FAILED:
            errors.print(f"Error: {result.error}", style="red", markup=False)
        elif result.status is LineStatus.CANCELLED:
            self.console.print(f"Command {result.message}.", style="yellow")
        elif result.status is LineStatus.INFO:
            self.console.print(result.message, style="yellow", markup=False)
        elif result.message:
            self.console.print(result.message, markup=False)

    def process_line(self, line: str, session: Session, errors: Console | None = None) -> LineResult:
        """Dispatch one line and render the outcome."""
        result = self.router.dispatch(line, session)
        self.render(result, errors=errors)
        return result

    # --- Front-ends ---

    def print_banner(self) -> None:
        modes = ", ".join(Mode.names())
        self.console.print(f"[bold]Vibesh[/bold] {__version__} - natural-language shell")
        self.console.print(
            "Type 'exit' to quit, 'mode' to switch processing mode, 'help' for available commands"
        )
        self.console.print(f"Modes: {modes}", markup=False)
        if not self._settings.has_api_key:
            self.console.print(
                "Warning: OPENAI_API_KEY not set. "
                "Generative and retrieval fallback will have limited functionality.",
                style="yellow",
            )

    def get_prompt_message(self, session: Session) -> FormattedText:
        """Prompt showing the active mode; yolo modes are highlighted."""
        style = "ansired bold" if session.mode.is_yolo else "ansigreen bold"
        return FormattedText([(style, f"vibesh({session.mode.value})> ")])

    def _create_prompt_session(self) -> PromptSession:
        completer = BuiltinCompleter(
            self.router.commands.get_completions(),
            Mode.names(),
        )
        return PromptSession(
            history=InMemoryHistory(),
            completer=completer,
            complete_while_typing=False,
        )

    def run_interactive(self, mode: Mode = Mode.DIRECT) -> int:
        """Run the read-eval loop on the terminal.

        Returns:
            Process exit code
        """
        session = Session(mode=mode)
        self._interactive = True
        self._prompt_session = self._create_prompt_session()
        bind_context(front_end="interactive", mode=mode.value)
        logger.info("repl_starting")

        self.print_banner()

        while not session.exit_requested:
            try:
                line = self._prompt_session.prompt(lambda: self.get_prompt_message(session))
            except KeyboardInterrupt:
                continue
            except EOFError:
                self.console.print("\nGoodbye!")
                break
            self.process_line(line, session)

        logger.info("repl_ending", lines=len(session.history))
        return 0

    def run_lines(
        self,
        lines: Iterable[str],
        mode: Mode,
        front_end: str,
        skip_shebang: bool = False,
    ) -> int:
        """Process lines non-interactively through one session.

        Blank lines and ``#`` comments are skipped. Per-line errors go to
        stderr and processing continues.

        Args:
            lines: Source lines
            mode: Initial mode
            front_end: Name bound into the log context
            skip_shebang: Drop the first line if it starts with ``#!``

        Returns:
            Process exit code
        """
        session = Session(mode=mode)
        self._interactive = False
        bind_context(front_end=front_end, mode=mode.value)
        logger.info("batch_starting")

        for number, raw in enumerate(lines, start=1):
            if number == 1 and skip_shebang and raw.startswith("#!"):
                continue
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            result = self.process_line(line, session, errors=self.error_console)
            if result.status is LineStatus.FAILED:
                logger.warning("batch_line_failed", line_number=number, error=result.error)
            if session.exit_requested:
                break

        logger.info("batch_ending", lines=len(session.history))
        return 0

    def run_script(self, path: str | Path, mode: Mode = Mode.GENERATIVE) -> int:
        """Run every line of a script file.

        Returns:
            Process exit code (1 if the file cannot be opened)
        """
        try:
            script: TextIO = open(path, encoding="utf-8")
        except OSError as e:
            self.error_console.print(f"Error: failed to open script file: {e}", style="red", markup=False)
            return 1

        with script:
            return self.run_lines(script, mode, front_end="script", skip_shebang=True)

    def run_piped(self, stream: IO[str], mode: Mode = Mode.DIRECT) -> int:
        """Run lines read from a non-interactive stream."""
        return self.run_lines(stream, mode, front_end="piped")

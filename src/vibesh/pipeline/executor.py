"""Command execution on the host interpreter.

Two forms are supported and must stay distinct:

- shell text (direct input and knowledge base templates) runs through
  ``<shell> -c`` so pipes, ``||`` and ``;`` in templates keep working;
- argv lists (generative candidates) run without a shell, so shell
  metacharacters in arguments are passed through literally.

Standard error is merged into standard output. Output captured before a
failure is always returned with the error.
"""

import subprocess
import time
from pathlib import Path

from vibesh.logging import Loggers
from vibesh.pipeline.models import ActionCandidate, ExecutionResult

logger = Loggers.pipeline()


class Executor:
    """Runs commands and captures their combined output."""

    def __init__(
        self,
        shell_executable: str = "sh",
        timeout_seconds: float | None = None,
        working_dir: Path | str | None = None,
    ):
        """Initialize the executor.

        Args:
            shell_executable: Interpreter used for shell text
            timeout_seconds: Kill the child after this long (None = no limit)
            working_dir: Working directory for commands (None = current)
        """
        self.shell_executable = shell_executable
        self.timeout_seconds = timeout_seconds
        self.working_dir = working_dir

    def run_candidate(self, candidate: ActionCandidate) -> ExecutionResult:
        """Run a candidate in the form it was produced in."""
        if candidate.shell:
            text = candidate.command[0] if candidate.command else ""
            return self.run(text, shell=True)
        return self.run(candidate.command, shell=False)

    def run(self, command: str | list[str], shell: bool = False) -> ExecutionResult:
        """Execute a command.

        Args:
            command: Shell text (``shell=True``) or an argv list
            shell: Whether to interpret ``command`` with the shell

        Returns:
            ExecutionResult with combined output and any error
        """
        if shell:
            if not isinstance(command, str) or not command.strip():
                return self._refuse_empty()
            argv = [self.shell_executable, "-c", command]
        else:
            if isinstance(command, str) or not command or not command[0]:
                return self._refuse_empty()
            argv = list(command)

        start_time = time.monotonic()
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                cwd=self.working_dir,
            )
        except OSError as e:
            logger.warning("command_spawn_failed", argv=argv, error=str(e))
            return ExecutionResult(
                output=b"",
                return_code=-1,
                duration_ms=self._elapsed_ms(start_time),
                error=f"Execution error: {e}",
                executed=False,
            )

        try:
            output, _ = process.communicate(timeout=self.timeout_seconds)
        except subprocess.TimeoutExpired:
            process.kill()
            output, _ = process.communicate()
            logger.warning("command_timeout", argv=argv, timeout=self.timeout_seconds)
            return ExecutionResult(
                output=output or b"",
                return_code=-1,
                duration_ms=self._elapsed_ms(start_time),
                error=f"Command timeout after {self.timeout_seconds} seconds",
            )

        return_code = process.returncode
        duration_ms = self._elapsed_ms(start_time)
        logger.info(
            "command_executed",
            argv=argv,
            return_code=return_code,
            duration_ms=duration_ms,
        )
        return ExecutionResult(
            output=output or b"",
            return_code=return_code,
            duration_ms=duration_ms,
            error=None if return_code == 0 else f"Command exited with code {return_code}",
        )

    def _refuse_empty(self) -> ExecutionResult:
        return ExecutionResult(
            output=b"",
            return_code=-1,
            error="Refusing to execute an empty command",
            executed=False,
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

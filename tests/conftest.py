"""Shared test fixtures and utilities for vibesh tests.

Provides:
- MockContext for isolating tests from global settings and API keys
- Fakes for the chat model, the confirmer and the executor
- Routers wired with those fakes
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import MagicMock

import pytest
import structlog

from vibesh.cli.router import ModeRouter
from vibesh.config import VibeshSettings, reload_settings, set_settings
from vibesh.pipeline.executor import Executor
from vibesh.pipeline.gate import ConfirmationRequest
from vibesh.pipeline.generative import GenerativeProcessor
from vibesh.pipeline.models import ActionCandidate, Chain, ExecutionResult


class MockContext:
    """Context manager for isolating tests from global state.

    Handles:
    - Clearing OPENAI_API_KEY and VIBESH_* environment variables
    - Resetting the global settings singleton
    - Running inside a temporary working directory with an empty home,
      so no real .env or .vibesh/settings.json is read

    Usage:
        with MockContext(openai_api_key="test-key") as ctx:
            settings = ctx.settings
            workspace = ctx.workspace_dir
    """

    def __init__(self, openai_api_key: str | None = None, **settings_kwargs: Any):
        """Initialize mock context.

        Args:
            openai_api_key: Optional API key for testing
            **settings_kwargs: Additional settings overrides
        """
        self._openai_api_key = openai_api_key
        self._settings_kwargs = settings_kwargs
        self._temp_dir: tempfile.TemporaryDirectory | None = None
        self._settings: VibeshSettings | None = None
        self._original_env: dict[str, str | None] = {}
        self._original_cwd: Path | None = None

    def __enter__(self) -> "MockContext":
        self._temp_dir = tempfile.TemporaryDirectory()
        home = self.workspace_dir / "home"
        home.mkdir()

        env_vars = ["OPENAI_API_KEY", "HOME"] + [k for k in os.environ if k.startswith("VIBESH_")]
        for var in env_vars:
            self._original_env[var] = os.environ.pop(var, None)
        os.environ["HOME"] = str(home)

        self._original_cwd = Path.cwd()
        os.chdir(self.workspace_dir)

        self._settings = VibeshSettings(
            openai_api_key=self._openai_api_key,
            **self._settings_kwargs,
        )
        set_settings(self._settings)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._original_cwd is not None:
            os.chdir(self._original_cwd)

        for var, value in self._original_env.items():
            if value is None:
                os.environ.pop(var, None)
            else:
                os.environ[var] = value

        reload_settings()

        if self._temp_dir:
            self._temp_dir.cleanup()

    @property
    def settings(self) -> VibeshSettings:
        if self._settings is None:
            raise RuntimeError("MockContext not entered")
        return self._settings

    @property
    def workspace_dir(self) -> Path:
        if self._temp_dir is None:
            raise RuntimeError("MockContext not entered")
        return Path(self._temp_dir.name)


class RecordingConfirmer:
    """Confirmer that replays canned answers and records every request."""

    def __init__(self, *answers: str | None):
        self.answers = list(answers)
        self.requests: list[ConfirmationRequest] = []

    def __call__(self, request: ConfirmationRequest) -> str | None:
        self.requests.append(request)
        return self.answers.pop(0) if self.answers else None


def make_chat_model(response: Any = None, side_effect: Any = None) -> MagicMock:
    """Chat model double whose structured invoke returns ``response``."""
    model = MagicMock()
    structured = model.with_structured_output.return_value
    structured.invoke.return_value = response
    if side_effect is not None:
        structured.invoke.side_effect = side_effect
    return model


def make_executor(
    output: bytes = b"ok\n",
    return_code: int = 0,
    error: str | None = None,
) -> MagicMock:
    """Executor double that never spawns a process."""
    executor = MagicMock(spec=Executor)
    executor.run_candidate.return_value = ExecutionResult(
        output=output,
        return_code=return_code,
        error=error,
    )
    return executor


def generative_candidate(**overrides: Any) -> ActionCandidate:
    fields: dict[str, Any] = {
        "explanation": "List the files",
        "command": ["ls", "-la"],
        "risk_score": 1,
        "reads_data": True,
        "writes_data": False,
        "source": Chain.GENERATIVE,
    }
    fields.update(overrides)
    return ActionCandidate(**fields)


@pytest.fixture(autouse=True, scope="session")
def quiet_logging() -> Generator[None, None, None]:
    """Only errors reach the captured output during tests."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.ERROR),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def mock_context() -> Generator[MockContext, None, None]:
    """Fixture providing an isolated context without an API key."""
    with MockContext() as ctx:
        yield ctx


@pytest.fixture
def mock_context_with_key() -> Generator[MockContext, None, None]:
    """Fixture providing an isolated context with an API key."""
    with MockContext(openai_api_key="test-openai-key") as ctx:
        yield ctx


@pytest.fixture
def confirmer() -> RecordingConfirmer:
    """Confirmer that declines (no answers queued)."""
    return RecordingConfirmer()


@pytest.fixture
def executor() -> MagicMock:
    return make_executor()


@pytest.fixture
def generative() -> MagicMock:
    """Generative processor double returning a low-risk candidate."""
    processor = MagicMock(spec=GenerativeProcessor)
    processor.process.return_value = generative_candidate()
    return processor


@pytest.fixture
def router_factory(
    executor: MagicMock,
    generative: MagicMock,
    confirmer: RecordingConfirmer,
) -> Callable[..., ModeRouter]:
    """Build routers wired to the fakes, with per-test overrides."""

    def factory(**overrides: Any) -> ModeRouter:
        kwargs: dict[str, Any] = {
            "executor": executor,
            "generative": generative,
            "confirmer": confirmer,
            "context_provider": lambda: "Current directory: /test\n",
        }
        kwargs.update(overrides)
        return ModeRouter(**kwargs)

    return factory

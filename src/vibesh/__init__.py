"""vibesh - a shell that turns natural language into commands.

Each input line is routed by the active mode through one of three
processor chains (direct, retrieval, generative), risk-scored, gated
behind confirmation when risky, and executed on the host shell.

Note: ModeRouter and ShellApp are lazy-loaded so that importing the
pipeline does not pull in the terminal front-end.
"""

__version__ = "0.1.0"

from vibesh.config import (
    SettingsContext,
    VibeshSettings,
    get_settings,
    reload_settings,
    set_settings,
)
from vibesh.errors import (
    ConfigurationError,
    ExecutionError,
    InvalidModeError,
    SchemaError,
    TransportError,
    VibeshError,
)
from vibesh.pipeline import ActionCandidate, LineResult, LineStatus, Mode, Session

# Heavy imports - lazy loaded on first access
_lazy_imports = {
    "GenerativeProcessor": "vibesh.pipeline.generative",
    "ModeRouter": "vibesh.cli.router",
    "ShellApp": "vibesh.cli.app",
}


def __getattr__(name: str):
    """Lazy import for heavy modules."""
    if name in _lazy_imports:
        import importlib

        module = importlib.import_module(_lazy_imports[name])
        value = getattr(module, name)
        globals()[name] = value  # Cache for future access
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    # Pipeline
    "ActionCandidate",
    "GenerativeProcessor",  # lazy
    "LineResult",
    "LineStatus",
    "Mode",
    "ModeRouter",  # lazy
    "Session",
    "ShellApp",  # lazy
    # Settings
    "SettingsContext",
    "VibeshSettings",
    "get_settings",
    "reload_settings",
    "set_settings",
    # Errors
    "ConfigurationError",
    "ExecutionError",
    "InvalidModeError",
    "SchemaError",
    "TransportError",
    "VibeshError",
]

"""Configuration for vibesh.

Settings Management:
    The module provides both a global singleton and context-based settings:

    1. Global singleton (simple cases):
        set_settings(my_settings)
        settings = get_settings()

    2. Context-based (isolated contexts, tests):
        with SettingsContext(my_settings):
            settings = get_settings()  # Returns my_settings

Settings Loading Priority (highest to lowest):
    1. Constructor arguments
    2. Environment variables (VIBESH_* prefix, OPENAI_API_KEY)
    3. Project config (./.vibesh/settings.json)
    4. User config (~/.vibesh/settings.json)
    5. .env file
    6. Default values
"""

from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Generator, Literal, Tuple, Type

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

APP_NAME = "vibesh"

__all__ = [
    "APP_NAME",
    "VibeshSettings",
    "SettingsContext",
    "get_settings",
    "set_settings",
    "reload_settings",
]


def _get_json_config_source(
    settings_cls: Type[BaseSettings],
    json_file: Path,
) -> PydanticBaseSettingsSource | None:
    """Create a JSON config source if the file exists.

    Args:
        settings_cls: The settings class
        json_file: Path to JSON config file

    Returns:
        JsonConfigSettingsSource if file exists, None otherwise
    """
    if not json_file.is_file():
        return None
    return JsonConfigSettingsSource(settings_cls, json_file=json_file)


class VibeshSettings(BaseSettings):
    """Runtime settings for the shell.

    Only ``openai_api_key`` is required for the generative chain; without
    it the direct and retrieval chains still work and the generative
    fallback reports a fixed informational message.
    """

    model_config = SettingsConfigDict(
        env_prefix="VIBESH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Generative chain
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key for the generative chain",
        validation_alias="OPENAI_API_KEY",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Alternative OpenAI-compatible endpoint",
    )
    model: str = Field(
        default="gpt-3.5-turbo",
        description="Chat model used to turn natural language into commands",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single model request",
    )

    # Gating and execution
    confirm_threshold: int = Field(
        default=7,
        ge=0,
        le=10,
        description="Risk score at or above which non-yolo modes ask for confirmation",
    )
    shell_executable: str = Field(
        default="sh",
        description="Interpreter used for raw shell text",
    )
    exec_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Kill executed commands after this many seconds (disabled by default)",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log output format (console for humans, json for aggregation)",
    )

    @property
    def has_api_key(self) -> bool:
        """Whether the generative chain can be used."""
        return bool(self.openai_api_key)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Insert the project and user JSON files between env and dotenv.

        JSON sources are only included if the files exist.
        """
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]

        project_json = _get_json_config_source(
            settings_cls, Path.cwd() / f".{APP_NAME}" / "settings.json"
        )
        if project_json:
            sources.append(project_json)

        user_json = _get_json_config_source(
            settings_cls, Path.home() / f".{APP_NAME}" / "settings.json"
        )
        if user_json:
            sources.append(user_json)

        sources.append(dotenv_settings)
        return tuple(sources)


# Context variable for settings (takes precedence over global singleton)
_settings_context: ContextVar[VibeshSettings | None] = ContextVar(
    "settings_context", default=None
)

_settings_instance: VibeshSettings | None = None


def get_settings() -> VibeshSettings:
    """Get the current settings instance.

    Resolution order:
    1. Context variable (set via SettingsContext)
    2. Global singleton (set via set_settings)
    3. Fresh VibeshSettings instance (created on first access)
    """
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = VibeshSettings()
    return _settings_instance


def set_settings(settings: VibeshSettings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


@contextmanager
def SettingsContext(settings: VibeshSettings) -> Generator[VibeshSettings, None, None]:
    """Context manager for isolated settings.

    Example:
        with SettingsContext(test_settings) as s:
            router = ModeRouter.from_settings()  # sees test_settings
    """
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> VibeshSettings:
    """Reload settings (clears global singleton and context cache).

    Returns:
        Fresh VibeshSettings instance
    """
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()

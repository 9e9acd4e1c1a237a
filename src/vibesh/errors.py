"""Error taxonomy for the line-processing pipeline.

Every error raised inside the pipeline is a ``VibeshError``. The router
turns these into line-scoped failures; none of them ends the session.
A declined confirmation is not an error at all and is reported as a
cancelled line result instead.
"""

from typing import Any


class VibeshError(Exception):
    """Base error for pipeline failures.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional error details
    """

    error_code = "VIBESH_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "message": self.message,
            "code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(VibeshError):
    """A required setting (usually the model API key) is missing."""

    error_code = "CONFIGURATION_ERROR"


class TransportError(VibeshError):
    """The call to the language model failed or timed out."""

    error_code = "TRANSPORT_ERROR"


class SchemaError(VibeshError):
    """The model response did not match the action schema.

    The offending payload is kept in ``raw`` so the user can see what the
    model actually sent.
    """

    error_code = "SCHEMA_ERROR"

    def __init__(self, message: str, raw: str = "", details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.raw = raw

    def __str__(self) -> str:
        if self.raw:
            return f"{self.message}\nRaw response: {self.raw}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["raw"] = self.raw
        return data


class ExecutionError(VibeshError):
    """The host interpreter failed to run a command.

    ``output`` holds whatever was captured before the failure.
    """

    error_code = "EXECUTION_ERROR"

    def __init__(self, message: str, output: bytes = b"", details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.output = output


class InvalidModeError(VibeshError):
    """A mode switch named a mode outside the closed set."""

    error_code = "INVALID_MODE"

"""Shared constants for vibesh."""

# Directory snapshot limits
CONTEXT_MAX_FILES = 20

# Log preview truncation
CONTENT_PREVIEW_LENGTH = 200

# Risk display bands
HIGH_RISK_SCORE = 7
MEDIUM_RISK_SCORE = 4

MISSING_API_KEY_MESSAGE = "API key not set. Please set OPENAI_API_KEY environment variable."


def truncate(text: str, max_length: int = CONTENT_PREVIEW_LENGTH) -> str:
    """Truncate text with ellipsis if it exceeds max_length."""
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text

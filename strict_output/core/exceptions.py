"""
Custom exceptions for the extraction engine.

Provides specific exception types for each failure mode of an attempt,
plus the final error raised once every attempt has been used up.
"""

from typing import Optional


class StrictOutputError(Exception):
    """Base exception for all extraction-related errors."""

    def __init__(self, message: str, prompt_index: Optional[int] = None, field: Optional[str] = None):
        self.message = message
        self.prompt_index = prompt_index
        self.field = field

        # Build descriptive error message
        error_parts = [message]
        if prompt_index is not None:
            error_parts.append(f"Prompt: {prompt_index}")
        if field is not None:
            error_parts.append(f"Field: {field}")

        super().__init__(" | ".join(error_parts))


class ConfigurationError(StrictOutputError):
    """Raised when configuration is invalid."""
    pass


class SchemaError(StrictOutputError):
    """Raised when an output schema cannot be interpreted."""
    pass


class ServiceInvocationError(StrictOutputError):
    """Raised when the completion service call itself fails."""
    pass


class ExtractionError(StrictOutputError):
    """Raised when no parseable structured block is found in a response."""
    pass


class MissingFieldError(StrictOutputError):
    """Raised when a required schema key is absent from a parsed record."""

    def __init__(self, field: str, prompt_index: Optional[int] = None):
        super().__init__(f"{field} not in JSON output", prompt_index=prompt_index, field=field)


class AttemptsExhaustedError(StrictOutputError):
    """Raised when a prompt fails on every allowed attempt.

    ``last_error`` holds the failure of the final attempt so callers can tell
    a bad schema from degenerate model output or a service outage.
    """

    def __init__(self, attempts: int, last_error: StrictOutputError, prompt_index: Optional[int] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to produce valid output after {attempts} attempts: "
            f"{type(last_error).__name__}: {last_error.message}",
            prompt_index=prompt_index,
        )


#: Failures the retry loop folds into feedback instead of surfacing.
RECOVERABLE_ERRORS = (ServiceInvocationError, ExtractionError, MissingFieldError)

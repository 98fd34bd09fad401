"""
Unified configuration for the extraction engine.

Collects every caller-tunable option of a run into a single dataclass with
sensible defaults and eager validation.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import ConfigurationError

BATCH_STRATEGIES = ("per_prompt", "combined")


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Options for a single extraction run.

    Instances are immutable; use :meth:`replace` to derive per-call overrides.
    """

    # === Coercion ===
    default_category: Optional[str] = None
    """Fallback value for enum fields whose value is not an allowed choice"""

    output_value_only: bool = False
    """Flatten each record to its values (a bare value when only one)"""

    # === LLM Configuration ===
    model: str = "gpt-4o-mini"
    """Model identifier passed through to the completion service"""

    temperature: float = 1.0
    """Sampling temperature (0.0-2.0)"""

    max_tokens: int = 4000
    """Maximum tokens for the completion"""

    # === Reliability ===
    max_attempts: int = 3
    """Attempts per prompt before giving up"""

    retry_base_delay: float = 0.0
    """Base delay in seconds for exponential back-off after service failures (0 disables)"""

    batch_strategy: str = "per_prompt"
    """'per_prompt' retries each prompt on its own; 'combined' sends the whole batch in one call"""

    # === Diagnostics ===
    verbose: bool = False
    """Log composed instructions and raw/repaired responses at INFO level"""

    def __post_init__(self):
        """Validate configuration values after initialization."""
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(f"temperature must be between 0.0 and 2.0, got {self.temperature}")

        if self.max_tokens <= 0:
            raise ConfigurationError(f"max_tokens must be positive, got {self.max_tokens}")

        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {self.max_attempts}")

        if self.retry_base_delay < 0:
            raise ConfigurationError(f"retry_base_delay must be non-negative, got {self.retry_base_delay}")

        if self.batch_strategy not in BATCH_STRATEGIES:
            raise ConfigurationError(
                f"batch_strategy must be one of {', '.join(BATCH_STRATEGIES)}, got {self.batch_strategy!r}"
            )

    def replace(self, **overrides: Any) -> 'ExtractionConfig':
        """Return a validated copy with ``overrides`` applied."""
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **overrides)

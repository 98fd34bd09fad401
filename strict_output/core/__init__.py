"""
Core functionality for the extraction engine.
"""

from .exceptions import (
    AttemptsExhaustedError,
    ConfigurationError,
    ExtractionError,
    MissingFieldError,
    SchemaError,
    ServiceInvocationError,
    StrictOutputError,
)
from .config import ExtractionConfig
from .engine import AttemptContext, AttemptOutcome, AttemptState, Extractor

__all__ = [
    'Extractor',
    'ExtractionConfig',
    'AttemptContext',
    'AttemptOutcome',
    'AttemptState',
    'StrictOutputError',
    'ServiceInvocationError',
    'ExtractionError',
    'MissingFieldError',
    'AttemptsExhaustedError',
    'SchemaError',
    'ConfigurationError',
]

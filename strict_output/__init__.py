"""
strict-output - schema-guided extraction from LLM completions

Turns free-form text from a completion service into validated records:
quote repair, nested-brace block extraction, enum coercion and retries that
feed each failure back to the model.
"""

from .core import (
    AttemptsExhaustedError,
    ConfigurationError,
    ExtractionConfig,
    ExtractionError,
    Extractor,
    MissingFieldError,
    SchemaError,
    ServiceInvocationError,
    StrictOutputError,
)
from .functional import strict_output
from .providers import LLMClient, LLMResponse, OpenAIClient
from .schemas import ExtractionResult, OutputSchema, UsageInfo

__version__ = "0.1.0"

__all__ = [
    'Extractor',
    'ExtractionConfig',
    'ExtractionResult',
    'OutputSchema',
    'UsageInfo',
    'LLMClient',
    'LLMResponse',
    'OpenAIClient',
    'strict_output',
    'StrictOutputError',
    'ServiceInvocationError',
    'ExtractionError',
    'MissingFieldError',
    'AttemptsExhaustedError',
    'SchemaError',
    'ConfigurationError',
]

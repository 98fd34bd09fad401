"""Pydantic schemas for extraction.

- OutputSchema: tagged description of the record to extract
  (ScalarField / EnumField / NestedField)
- UsageInfo: token usage reported by the completion service
- ExtractionResult: records plus attempt and usage metadata

Example:
    from strict_output.schemas import OutputSchema

    schema = OutputSchema.from_mapping({"mood": ["happy", "sad"], "reason": "why"})
    schema.required_keys()   # ["mood", "reason"]
    schema.has_enum_fields() # True
"""

from .base import ExtractionResult, UsageInfo
from .output_schema import (
    EnumField,
    NestedField,
    OutputSchema,
    ScalarField,
    SchemaField,
    has_placeholder,
    is_templated_key,
)

__all__ = [
    "OutputSchema",
    "ScalarField",
    "EnumField",
    "NestedField",
    "SchemaField",
    "has_placeholder",
    "is_templated_key",
    "UsageInfo",
    "ExtractionResult",
]

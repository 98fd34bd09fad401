"""Record validation and enum coercion against an OutputSchema.

Only the top-level field set is checked. Nested schemas are described to the
model but their contents are passed through untouched.
"""

from __future__ import annotations

from typing import Any, Optional

from .core.exceptions import MissingFieldError
from .schemas.output_schema import EnumField, OutputSchema, is_templated_key

CATEGORY_SEPARATOR = ":"


def validate_record(
    record: dict[str, Any],
    schema: OutputSchema,
    default_category: Optional[str] = None,
    prompt_index: Optional[int] = None,
) -> dict[str, Any]:
    """Check required keys and coerce enum fields in place.

    Raises:
        MissingFieldError: A non-templated schema key is absent.
    """
    for key in schema.required_keys():
        if key not in record:
            raise MissingFieldError(key, prompt_index=prompt_index)

    for key, spec in schema.enum_fields().items():
        if key in record:
            record[key] = coerce_choice(record[key], spec, default_category)

    return record


def coerce_choice(value: Any, spec: EnumField, default_category: Optional[str] = None) -> Any:
    """Pull an enum value towards ``spec.choices``.

    Applied in order: a list reduces to its first element; a value outside
    the choices becomes ``default_category`` when one is set; a string is cut
    at the first ``:`` (drops an explanation appended to the category).
    """
    if isinstance(value, list):
        value = value[0] if value else None

    if value not in spec.choices and default_category:
        value = default_category

    if isinstance(value, str) and CATEGORY_SEPARATOR in value:
        value = value.split(CATEGORY_SEPARATOR, 1)[0]

    return value


def flatten_record(record: dict[str, Any], schema: OutputSchema) -> Any:
    """Reduce a record to its values for ``output_value_only``.

    Values follow schema key order; values under model-chosen keys
    (templated keys) follow in the order the model wrote them. A single value
    is returned bare.
    """
    ordered = [record[key] for key in schema.properties if key in record]
    declared = set(schema.properties)
    if any(is_templated_key(key) for key in declared):
        ordered.extend(v for k, v in record.items() if k not in declared)

    if len(ordered) == 1:
        return ordered[0]
    return ordered

"""OutputSchema - tagged description of the record shape to extract.

Callers usually write schemas as plain mappings::

    {
        "mood": ["happy", "sad"],                 # enum: pick one
        "reason": "why the speaker feels this",   # scalar: free text
        "<speaker>": {"age": "approximate age"},  # nested, templated key
    }

:meth:`OutputSchema.from_mapping` turns that into a discriminated union of
:class:`ScalarField`, :class:`EnumField` and :class:`NestedField`, so code
walking the schema switches on ``kind`` instead of probing runtime types.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import SchemaError

PLACEHOLDER_PATTERN = re.compile(r"<.*?>")


def has_placeholder(text: str) -> bool:
    """True if ``text`` contains an angle-bracket placeholder such as ``<name>``."""
    return PLACEHOLDER_PATTERN.search(text) is not None


class ScalarField(BaseModel):
    """Free-form value described by a short instruction."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    description: str


class EnumField(BaseModel):
    """Value that must resolve to one of ``choices``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["enum"] = "enum"
    choices: list[str]


class NestedField(BaseModel):
    """Value that is itself a structured block."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["nested"] = "nested"
    children: OutputSchema


SchemaField = Annotated[
    Union[ScalarField, EnumField, NestedField],
    Field(discriminator="kind"),
]


class OutputSchema(BaseModel):
    """Ordered mapping of field name to :data:`SchemaField`.

    A key containing a placeholder (``"<topic>"``) is *templated*: the model
    invents the key name, so it is never required verbatim in the output.
    """

    model_config = ConfigDict(frozen=True)

    properties: dict[str, SchemaField]

    # -- construction ----------------------------------------------------

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> OutputSchema:
        """Build a schema from the plain ``dict`` shape callers write."""
        if not isinstance(mapping, Mapping):
            raise SchemaError(f"Output schema must be a mapping, got {type(mapping).__name__}")

        properties: dict[str, Any] = {}
        for key, value in mapping.items():
            if not isinstance(key, str):
                raise SchemaError(f"Schema keys must be strings, got {key!r}")
            properties[key] = _field_from_value(key, value)
        return cls(properties=properties)

    @classmethod
    def coerce(cls, schema: OutputSchema | Mapping[str, Any]) -> OutputSchema:
        """Accept either a built schema or a plain mapping."""
        if isinstance(schema, OutputSchema):
            return schema
        return cls.from_mapping(schema)

    def to_mapping(self) -> dict[str, Any]:
        """Serialize back to the plain ``dict`` shape (inverse of :meth:`from_mapping`)."""
        out: dict[str, Any] = {}
        for key, spec in self.properties.items():
            if spec.kind == "scalar":
                out[key] = spec.description
            elif spec.kind == "enum":
                out[key] = list(spec.choices)
            else:
                out[key] = spec.children.to_mapping()
        return out

    # -- inspection ------------------------------------------------------

    def required_keys(self) -> list[str]:
        """Top-level keys that must appear literally in a record."""
        return [key for key in self.properties if not is_templated_key(key)]

    def enum_fields(self) -> dict[str, EnumField]:
        """Top-level enum fields, in schema order."""
        return {k: v for k, v in self.properties.items() if v.kind == "enum"}

    def has_enum_fields(self) -> bool:
        """True if any field at any depth is an enum."""
        for spec in self.properties.values():
            if spec.kind == "enum":
                return True
            if spec.kind == "nested" and spec.children.has_enum_fields():
                return True
        return False

    def has_placeholders(self) -> bool:
        """True if any key or value at any depth contains a placeholder."""
        for key, spec in self.properties.items():
            if has_placeholder(key):
                return True
            if spec.kind == "scalar" and has_placeholder(spec.description):
                return True
            if spec.kind == "enum" and any(has_placeholder(c) for c in spec.choices):
                return True
            if spec.kind == "nested" and spec.children.has_placeholders():
                return True
        return False


def is_templated_key(key: str) -> bool:
    """True if ``key`` is a placeholder the model must replace with its own name."""
    return has_placeholder(key)


def _field_from_value(key: str, value: Any) -> Any:
    if isinstance(value, str):
        return {"kind": "scalar", "description": value}
    if isinstance(value, (list, tuple)):
        if not value:
            raise SchemaError("Enum field must list at least one choice", field=key)
        if not all(isinstance(choice, str) for choice in value):
            raise SchemaError("Enum choices must all be strings", field=key)
        return {"kind": "enum", "choices": list(value)}
    if isinstance(value, Mapping):
        return {"kind": "nested", "children": OutputSchema.from_mapping(value)}
    if isinstance(value, (ScalarField, EnumField, NestedField)):
        return value.model_dump()
    raise SchemaError(
        f"Unsupported schema value of type {type(value).__name__}; "
        "expected a description string, a list of choices or a nested mapping",
        field=key,
    )


NestedField.model_rebuild()
OutputSchema.model_rebuild()

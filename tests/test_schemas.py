"""Tests for OutputSchema and the schema result models."""

from __future__ import annotations

import pytest

from strict_output.core.exceptions import SchemaError
from strict_output.schemas import (
    EnumField,
    ExtractionResult,
    NestedField,
    OutputSchema,
    ScalarField,
    UsageInfo,
    is_templated_key,
)


# -- construction --------------------------------------------------------


class TestFromMapping:
    def test_field_kinds(self):
        schema = OutputSchema.from_mapping({
            "reason": "why",
            "mood": ["happy", "sad"],
            "author": {"name": "full name"},
        })
        assert isinstance(schema.properties["reason"], ScalarField)
        assert isinstance(schema.properties["mood"], EnumField)
        assert isinstance(schema.properties["author"], NestedField)
        assert schema.properties["mood"].choices == ["happy", "sad"]
        assert schema.properties["author"].children.properties["name"].description == "full name"

    def test_key_order_preserved(self):
        schema = OutputSchema.from_mapping({"b": "1", "a": "2", "c": "3"})
        assert list(schema.properties) == ["b", "a", "c"]

    def test_tuple_choices(self):
        schema = OutputSchema.from_mapping({"mood": ("happy", "sad")})
        assert schema.properties["mood"].choices == ["happy", "sad"]

    def test_to_mapping_inverse(self):
        raw = {"reason": "why", "mood": ["happy", "sad"], "author": {"<role>": "what they did"}}
        assert OutputSchema.from_mapping(raw).to_mapping() == raw

    def test_coerce_passes_schema_through(self):
        schema = OutputSchema.from_mapping({"a": "x"})
        assert OutputSchema.coerce(schema) is schema
        assert OutputSchema.coerce({"a": "x"}) == schema

    def test_unsupported_value_raises(self):
        with pytest.raises(SchemaError) as exc_info:
            OutputSchema.from_mapping({"count": 3})
        assert exc_info.value.field == "count"

    def test_empty_choices_raise(self):
        with pytest.raises(SchemaError, match="at least one choice"):
            OutputSchema.from_mapping({"mood": []})

    def test_non_string_choices_raise(self):
        with pytest.raises(SchemaError, match="strings"):
            OutputSchema.from_mapping({"mood": ["happy", 1]})

    def test_non_mapping_raises(self):
        with pytest.raises(SchemaError):
            OutputSchema.from_mapping(["a", "b"])


# -- inspection ----------------------------------------------------------


class TestInspection:
    def test_templated_key(self):
        assert is_templated_key("<topic>")
        assert is_templated_key("fact about <topic>")
        assert not is_templated_key("topic")

    def test_required_keys_skip_templated(self):
        schema = OutputSchema.from_mapping({"<topic>": "x", "source": "y"})
        assert schema.required_keys() == ["source"]

    def test_enum_fields_top_level_only(self):
        schema = OutputSchema.from_mapping({"a": ["x"], "n": {"b": ["y"]}})
        assert list(schema.enum_fields()) == ["a"]

    def test_has_enum_fields_nested(self):
        assert OutputSchema.from_mapping({"n": {"b": ["y", "z"]}}).has_enum_fields()
        assert not OutputSchema.from_mapping({"a": "x"}).has_enum_fields()

    def test_has_placeholders(self):
        assert OutputSchema.from_mapping({"<k>": "x"}).has_placeholders()
        assert OutputSchema.from_mapping({"k": "go to <place>"}).has_placeholders()
        assert OutputSchema.from_mapping({"k": ["<a>", "b"]}).has_placeholders()
        assert OutputSchema.from_mapping({"k": {"j": "<deep>"}}).has_placeholders()
        assert not OutputSchema.from_mapping({"k": "plain", "e": ["a < b"]}).has_placeholders()


# -- result models -------------------------------------------------------


class TestResultModels:
    def test_usage_addition(self):
        total = UsageInfo(prompt_tokens=1, completion_tokens=2, total_tokens=3, model="m") + UsageInfo(
            prompt_tokens=10, completion_tokens=20, total_tokens=30
        )
        assert total.total_tokens == 33
        assert total.prompt_tokens == 11
        assert total.model == "m"

    def test_total_attempts(self):
        result = ExtractionResult(output=[], attempts=[1, 3, 2])
        assert result.total_attempts == 6
        assert result.usage.total_tokens == 0

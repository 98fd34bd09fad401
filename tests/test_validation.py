"""Tests for record validation, enum coercion and value flattening."""

from __future__ import annotations

import pytest

from strict_output.core.exceptions import MissingFieldError
from strict_output.schemas.output_schema import EnumField, OutputSchema
from strict_output.validation import coerce_choice, flatten_record, validate_record

MOOD = EnumField(choices=["happy", "sad"])


# -- coerce_choice -------------------------------------------------------


class TestCoerceChoice:
    def test_valid_value_unchanged(self):
        assert coerce_choice("happy", MOOD) == "happy"

    def test_separator_truncation(self):
        assert coerce_choice("happy: because it's sunny", MOOD) == "happy"

    def test_fallback_to_default(self):
        assert coerce_choice("ecstatic", MOOD, default_category="neutral") == "neutral"

    def test_invalid_kept_without_default(self):
        assert coerce_choice("ecstatic", MOOD) == "ecstatic"

    def test_empty_default_is_no_default(self):
        assert coerce_choice("ecstatic", MOOD, default_category="") == "ecstatic"

    def test_list_reduced_to_first(self):
        assert coerce_choice(["sad", "because rain"], MOOD) == "sad"

    def test_list_reduced_before_fallback(self):
        assert coerce_choice(["ecstatic", "happy"], MOOD, default_category="neutral") == "neutral"

    def test_empty_list_falls_back(self):
        assert coerce_choice([], MOOD, default_category="neutral") == "neutral"

    def test_fallback_applies_before_truncation(self):
        """An explained answer is outside the choices, so a default wins."""
        assert coerce_choice("happy: sunny", MOOD, default_category="neutral") == "neutral"

    def test_non_string_value_not_truncated(self):
        assert coerce_choice(3, MOOD) == 3


# -- validate_record -----------------------------------------------------


class TestValidateRecord:
    def test_clean_record_passes_through(self):
        schema = OutputSchema.from_mapping({"title": "a title", "body": "the body"})
        record = {"title": "T", "body": "B"}
        assert validate_record(dict(record), schema) == record

    def test_missing_key_raises(self):
        schema = OutputSchema.from_mapping({"title": "a title", "body": "the body"})
        with pytest.raises(MissingFieldError) as exc_info:
            validate_record({"title": "T"}, schema)
        assert exc_info.value.field == "body"
        assert "body not in JSON output" in str(exc_info.value)

    def test_templated_key_not_required(self):
        schema = OutputSchema.from_mapping({"<topic>": "a summary", "source": "where"})
        assert validate_record({"source": "web"}, schema) == {"source": "web"}

    def test_extra_keys_kept(self):
        schema = OutputSchema.from_mapping({"a": "x"})
        assert validate_record({"a": "1", "b": "2"}, schema) == {"a": "1", "b": "2"}

    def test_enum_coerced(self):
        schema = OutputSchema.from_mapping({"mood": ["happy", "sad"]})
        record = validate_record({"mood": ["sad", "because rain"]}, schema)
        assert record == {"mood": "sad"}

    def test_nested_not_coerced(self):
        schema = OutputSchema.from_mapping({"inner": {"mood": ["happy", "sad"]}})
        record = validate_record({"inner": {"mood": "ecstatic"}}, schema, default_category="neutral")
        assert record == {"inner": {"mood": "ecstatic"}}

    def test_prompt_index_attached(self):
        schema = OutputSchema.from_mapping({"a": "x"})
        with pytest.raises(MissingFieldError) as exc_info:
            validate_record({}, schema, prompt_index=2)
        assert exc_info.value.prompt_index == 2


# -- flatten_record ------------------------------------------------------


class TestFlattenRecord:
    def test_two_fields(self):
        schema = OutputSchema.from_mapping({"a": "x", "b": "y"})
        assert flatten_record({"a": "x", "b": "y"}, schema) == ["x", "y"]

    def test_single_field_unwrapped(self):
        schema = OutputSchema.from_mapping({"a": "x"})
        assert flatten_record({"a": "x"}, schema) == "x"

    def test_schema_order_wins(self):
        schema = OutputSchema.from_mapping({"a": "x", "b": "y"})
        assert flatten_record({"b": "2", "a": "1"}, schema) == ["1", "2"]

    def test_templated_values_follow(self):
        schema = OutputSchema.from_mapping({"id": "an id", "<name>": "value"})
        assert flatten_record({"Paris": "2.1m", "id": "7"}, schema) == ["7", "2.1m"]

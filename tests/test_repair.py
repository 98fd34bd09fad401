"""Tests for quote repair."""

from __future__ import annotations

import json

from strict_output.parsing.repair import (
    REPAIR_RULES,
    collapse_escaped_quotes,
    fold_typographic_quotes,
    repair_quotes,
    restore_apostrophes,
    unify_quote_style,
)


# -- individual rules ----------------------------------------------------


class TestRules:
    def test_rule_order(self):
        assert REPAIR_RULES == (
            fold_typographic_quotes,
            unify_quote_style,
            restore_apostrophes,
            collapse_escaped_quotes,
        )

    def test_fold_typographic_quotes(self):
        assert fold_typographic_quotes("“a” ‘b’") == "\"a\" 'b'"

    def test_unify_quote_style(self):
        assert unify_quote_style("{'a': 'b'}") == '{"a": "b"}'

    def test_restore_apostrophes_between_word_chars(self):
        assert restore_apostrophes('it"s don"t') == "it's don't"

    def test_restore_apostrophes_leaves_structural_quotes(self):
        text = '{"a":"x","b":"y"}'
        assert restore_apostrophes(text) == text

    def test_collapse_escaped_quotes(self):
        assert collapse_escaped_quotes('say \\\\"hi\\\\"') == 'say \\"hi\\"'


# -- full pass -----------------------------------------------------------


class TestRepairQuotes:
    def test_clean_json_unchanged(self):
        text = '{"a": "x", "b": ["c", "d"], "n": {"m": 1}}'
        assert repair_quotes(text) == text

    def test_single_quoted_block(self):
        assert repair_quotes("{'mood': 'happy'}") == '{"mood": "happy"}'

    def test_apostrophe_inside_value_survives(self):
        repaired = repair_quotes("{'mood': 'happy: because it's sunny'}")
        assert json.loads(repaired) == {"mood": "happy: because it's sunny"}

    def test_typographic_quotes(self):
        repaired = repair_quotes("{“mood”: “sad”}")
        assert json.loads(repaired) == {"mood": "sad"}

    def test_doubly_escaped_quotes(self):
        repaired = repair_quotes('{"a": "say \\\\"hi\\\\""}')
        assert json.loads(repaired) == {"a": 'say "hi"'}

    def test_known_failure_double_quotes_inside_single_quoted_value(self):
        """Double-quoted speech inside a single-quoted value cannot be told apart."""
        repaired = repair_quotes('{\'quote\': \'he said "hi" loudly\'}')
        assert repaired == '{"quote": "he said "hi" loudly"}'

    def test_known_failure_trailing_apostrophe(self):
        repaired = repair_quotes("{'owner': 'the students' notes'}")
        assert repaired == '{"owner": "the students" notes"}'

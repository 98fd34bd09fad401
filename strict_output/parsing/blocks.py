"""Locate and parse brace-delimited blocks inside free-form text."""

from __future__ import annotations

import json
from typing import Any

from ..core.exceptions import ExtractionError
from ..utils.logger import get_logger
from .repair import repair_quotes

logger = get_logger(__name__)


def find_blocks(text: str) -> list[str]:
    """Return top-level ``{...}`` substrings in order of appearance.

    Braces are balanced to any depth; braces inside double-quoted strings
    are ignored. An opening brace that is never closed is skipped and the
    scan resumes right after it, so complete blocks nested inside a
    truncated one are still found.
    """
    blocks: list[str] = []
    i = 0
    n = len(text)

    while i < n:
        if text[i] == "{":
            end = _match_brace(text, i)
            if end is not None:
                blocks.append(text[i : end + 1])
                i = end + 1
                continue
        i += 1

    return blocks


def _match_brace(text: str, start: int) -> int | None:
    """Index of the brace closing the one at ``start``, or None."""
    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(text)):
        char = text[i]

        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i

    return None


def parse_blocks(blocks: list[str]) -> list[dict[str, Any]]:
    """Parse each candidate independently, skipping the ones that fail.

    A candidate is parsed as written first; only when that fails is it
    parsed again after :func:`repair_quotes`. Well-formed JSON therefore
    passes through untouched, apostrophes and quoted speech included.
    """
    parsed: list[dict[str, Any]] = []
    for block in blocks:
        obj = _loads(block)
        if isinstance(obj, dict):
            parsed.append(obj)
    return parsed


def _loads(block: str) -> Any:
    try:
        return json.loads(block)
    except json.JSONDecodeError:
        pass
    repaired = repair_quotes(block)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        logger.debug("Failed to parse candidate block (%s): %s", exc, repaired)
        return None


def extract_records(text: str, list_input: bool = False) -> list[dict[str, Any]]:
    """Extract parsed records from raw completion text.

    Candidates are located in the text as written. If none of them parses,
    the search is repeated on the quote-repaired text, since single-quoted
    strings can hide braces from the matcher.

    Args:
        text: Completion text as returned by the service.
        list_input: When False only the first parsed block is returned;
            when True every parsed block is returned in order.

    Returns:
        A non-empty list of mappings.

    Raises:
        ExtractionError: No candidate block was found, or none parsed.
    """
    blocks = find_blocks(text)
    records = parse_blocks(blocks)
    if not records:
        repaired_blocks = find_blocks(repair_quotes(text))
        if repaired_blocks != blocks:
            records = parse_blocks(repaired_blocks)
        blocks = blocks or repaired_blocks

    if not blocks:
        raise ExtractionError("No valid JSON found in the response")
    if not records:
        raise ExtractionError(f"Failed to parse any JSON from the response ({len(blocks)} candidate(s))")

    if not list_input:
        return records[:1]
    return records

"""System instruction composer.

The instruction sent on every attempt is::

    <caller's system prompt>
    <output format directive: the serialized schema>
    <conditional guidance: enum fields, placeholders, list input>
    <feedback from earlier failed attempts>

Guidance blocks are only added when the schema (or the prompt batch) needs
them, so a plain schema yields a short instruction.
"""

from __future__ import annotations

import json

from .schemas.output_schema import OutputSchema

ENUM_GUIDANCE = (
    "If the output field is a list, classify the output into the best "
    "element of the list and output only that element."
)

PLACEHOLDER_GUIDANCE = (
    "Any text enclosed by < and > must be replaced with valid, concrete content, "
    "both in values and in keys. Example input: Go to <location>, "
    "Example output: Go to the garden. "
    "Example key: {\"<city>\": \"population\"} becomes {\"Paris\": \"2.1 million\"}."
)

LIST_INPUT_GUIDANCE = "Generate a list of JSON objects, one JSON object for each input element."

PER_ELEMENT_GUIDANCE = (
    "The input is one element of a larger list. Generate exactly one JSON object for it."
)


def build_system_message(
    system_prompt: str,
    schema: OutputSchema,
    list_input: bool = False,
    feedback: str = "",
    per_element: bool = False,
) -> str:
    """Compose the full system instruction for one attempt.

    Args:
        system_prompt: The caller's base instruction.
        schema: Output schema the record must follow.
        list_input: True when the prompt batch is a sequence.
        per_element: True when each call carries a single element of that
            sequence, so one object is expected per call.
        feedback: Accumulated error feedback from failed attempts, appended
            verbatim.

    Returns:
        Complete system message string.
    """
    parts = [system_prompt, _build_format_directive(schema)]
    parts.extend(_build_guidance(schema, list_input, per_element))
    return "\n".join(parts) + feedback


def _build_format_directive(schema: OutputSchema) -> str:
    serialized = json.dumps(schema.to_mapping(), ensure_ascii=False)
    keys = ", ".join(schema.properties)
    return (
        f"You are to output the following in JSON format: {serialized}. "
        f"Output exactly these keys: {keys}. "
        "Ensure proper formatting of all JSON elements, using double quotes "
        "around every key and string value."
    )


def _build_guidance(schema: OutputSchema, list_input: bool, per_element: bool) -> list[str]:
    guidance: list[str] = []
    if schema.has_enum_fields():
        guidance.append(ENUM_GUIDANCE)
    if schema.has_placeholders():
        guidance.append(PLACEHOLDER_GUIDANCE)
    if list_input:
        guidance.append(PER_ELEMENT_GUIDANCE if per_element else LIST_INPUT_GUIDANCE)
    return guidance

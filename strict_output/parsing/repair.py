"""Quote repair applied to raw completions before block extraction.

Models quote keys and values inconsistently: single quotes, typographic
quotes, doubly escaped quotes. :func:`repair_quotes` normalizes structural
quoting to JSON double quotes with a fixed rule order:

1. Typographic quotes fold to ASCII (``“”`` -> ``"``, ``‘’`` -> ``'``).
2. Every single quote becomes a double quote.
3. A double quote between two word characters goes back to an apostrophe
   (``it"s`` -> ``it's``).
4. Over-escaped quotes collapse one level (``\\\\"`` -> ``\\"``).

The pass is purely textual and never looks at the schema. It is lossy:
quoted speech inside a value (``"he said 'hi'"``) and apostrophes not
flanked by word characters (``"the students' notes"``) come out with stray
double quotes and will not parse.
"""

from __future__ import annotations

import re

_TYPOGRAPHIC_QUOTES = str.maketrans({
    "“": '"',
    "”": '"',
    "„": '"',
    "‘": "'",
    "’": "'",
    "‚": "'",
})

_INWORD_QUOTE = re.compile(r'(?<=\w)"(?=\w)')


def fold_typographic_quotes(text: str) -> str:
    return text.translate(_TYPOGRAPHIC_QUOTES)


def unify_quote_style(text: str) -> str:
    return text.replace("'", '"')


def restore_apostrophes(text: str) -> str:
    return _INWORD_QUOTE.sub("'", text)


def collapse_escaped_quotes(text: str) -> str:
    return text.replace('\\\\"', '\\"')


REPAIR_RULES = (
    fold_typographic_quotes,
    unify_quote_style,
    restore_apostrophes,
    collapse_escaped_quotes,
)


def repair_quotes(text: str) -> str:
    """Apply every rule of :data:`REPAIR_RULES` in order."""
    for rule in REPAIR_RULES:
        text = rule(text)
    return text

"""Text repair and structured-block extraction."""

from .blocks import extract_records, find_blocks, parse_blocks
from .repair import REPAIR_RULES, repair_quotes

__all__ = [
    "extract_records",
    "find_blocks",
    "parse_blocks",
    "repair_quotes",
    "REPAIR_RULES",
]

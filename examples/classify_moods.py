#!/usr/bin/env python3
"""
Classify the mood of a few short texts with a live OpenAI model.

Requires OPENAI_API_KEY (read from the environment or a .env file).
"""

import os
import sys

from dotenv import load_dotenv

from strict_output import AttemptsExhaustedError, ExtractionConfig, Extractor, OpenAIClient
from strict_output.utils import configure_logging

load_dotenv()

SCHEMA = {
    "mood": ["happy", "sad", "angry", "neutral"],
    "reason": "one sentence explaining the classification",
    "<keyword>": "the word in the text that best signals the mood",
}

TEXTS = [
    "Finally got the keys to our new flat today!",
    "The train was cancelled again and nobody told us.",
    "It's Tuesday.",
]


def main() -> int:
    if not os.getenv("OPENAI_API_KEY"):
        print("OPENAI_API_KEY is not set")
        return 1

    configure_logging("INFO")
    extractor = Extractor(
        client=OpenAIClient(timeout=30.0),
        config=ExtractionConfig(default_category="neutral", temperature=0.3),
    )

    try:
        result = extractor.extract("Classify the mood of the text.", TEXTS, SCHEMA)
    except AttemptsExhaustedError as e:
        print(f"Extraction failed: {e}")
        print(f"Last error: {e.last_error!r}")
        return 1

    for text, record in zip(TEXTS, result.output):
        print(f"{text}\n  -> {record}")
    print(f"\nAttempts per prompt: {result.attempts}, tokens used: {result.usage.total_tokens}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

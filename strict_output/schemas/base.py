"""Base schema types shared by providers and the engine."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class UsageInfo(BaseModel):
    """Token usage from one or more LLM calls.

    Attributes:
        prompt_tokens: Number of tokens in the prompt/input.
        completion_tokens: Number of tokens in the completion/output.
        total_tokens: Sum of prompt and completion tokens.
        model: Model identifier that served the request.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    model: str = ""

    def __add__(self, other: UsageInfo) -> UsageInfo:
        return UsageInfo(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            model=self.model or other.model,
        )


class ExtractionResult(BaseModel):
    """Output of a run together with what it took to get it.

    Attributes:
        output: The record, or list of records for a prompt sequence.
        attempts: Attempts used per prompt (one entry per service-call loop).
        usage: Token usage summed over every attempt, failed ones included.
    """

    output: Any
    attempts: list[int] = []
    usage: UsageInfo = UsageInfo()

    @property
    def total_attempts(self) -> int:
        return sum(self.attempts)

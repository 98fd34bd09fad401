"""Completion-service boundary: the client protocol and what it returns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from ..schemas.base import UsageInfo


@dataclass
class LLMResponse:
    """Text blob returned by one completion call.

    The engine only reads ``content``; ``usage`` is summed into
    ``ExtractionResult.usage`` when the service reports it.
    """

    content: str
    usage: Optional[UsageInfo] = None


class LLMAPIError(Exception):
    """A completion call that failed before producing any text.

    Adapters raise this instead of their SDK's exception types. The engine
    treats it like any other failed attempt; ``retry_after`` (seconds, from a
    rate-limit response) stretches the back-off before the next attempt when
    back-off is enabled.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
        is_rate_limit: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after
        self.is_rate_limit = is_rate_limit


@runtime_checkable
class LLMClient(Protocol):
    """Anything that can turn a system instruction and a prompt into text.

    ``messages`` is always ``[system, user]``: the composed instruction,
    then the prompt text. Test doubles only need an async ``complete``.
    """

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse: ...

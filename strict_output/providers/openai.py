"""OpenAI provider adapter - default, covers all OpenAI-compatible APIs.

Uses the Chat Completions endpoint (``client.chat.completions.create``), which
is also what third-party OpenAI-compatible servers (Ollama, Groq, vLLM, LM
Studio) expose when a ``base_url`` is configured.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from ..schemas.base import UsageInfo
from .base import LLMAPIError, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Adapter for OpenAI and OpenAI-compatible providers.

    The SDK client is created lazily on first use, so constructing an
    ``OpenAIClient`` never requires an API key to be present.
    ``timeout`` is forwarded to the SDK and is the place to bound how long a
    single completion may take.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            from openai import AsyncOpenAI

            key = self._api_key or os.environ.get("OPENAI_API_KEY")
            kwargs: dict[str, Any] = {"api_key": key}
            if self._base_url:
                kwargs["base_url"] = self._base_url
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        from openai import APIError, APITimeoutError, RateLimitError

        client = self._get_client()
        kwargs: dict[str, Any] = dict(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        try:
            response = await client.chat.completions.create(**kwargs)
        except RateLimitError as exc:
            raise LLMAPIError(
                f"OpenAI rate limit for model '{model}': {exc}",
                status_code=429,
                retry_after=_retry_after(exc),
                is_rate_limit=True,
            ) from exc
        except APITimeoutError as exc:
            raise LLMAPIError(
                f"OpenAI timeout for model '{model}': {exc}",
                status_code=408,
            ) from exc
        except APIError as exc:
            raise LLMAPIError(
                f"OpenAI API error for model '{model}': {exc}",
                status_code=getattr(exc, "status_code", None),
            ) from exc

        if not response.choices:
            logger.warning("OpenAI returned no choices for model '%s'", model)
            return LLMResponse(content="")

        content = response.choices[0].message.content or ""
        usage = None
        if response.usage:
            usage = UsageInfo(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
                model=model,
            )

        return LLMResponse(content=content, usage=usage)


def _retry_after(exc: Any) -> float | None:
    """Read the ``retry-after`` header off a rate-limit error, if present."""
    response = getattr(exc, "response", None)
    if response is None:
        return None
    header = response.headers.get("retry-after")
    if not header:
        return None
    try:
        return float(header)
    except (ValueError, TypeError):
        return None

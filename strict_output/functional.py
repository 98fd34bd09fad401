"""Function-style entry point mirroring the classic ``strict_output`` call."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from .core.config import ExtractionConfig
from .core.engine import Extractor
from .providers.base import LLMClient


def strict_output(
    system_prompt: str,
    user_prompt: Union[str, Sequence[str]],
    output_format: Mapping[str, Any],
    default_category: str = "",
    output_value_only: bool = False,
    model: str = "gpt-4o-mini",
    temperature: float = 1,
    num_tries: int = 3,
    verbose: bool = False,
    client: Optional[LLMClient] = None,
) -> Any:
    """Extract a record (or one per prompt) shaped like ``output_format``.

    A thin wrapper that builds a one-off :class:`Extractor`. Pass ``client``
    to reuse a configured completion client; otherwise an OpenAI client is
    created from ``OPENAI_API_KEY``.
    """
    config = ExtractionConfig(
        default_category=default_category or None,
        output_value_only=output_value_only,
        model=model,
        temperature=temperature,
        max_attempts=num_tries,
        verbose=verbose,
    )
    return Extractor(client=client, config=config).run(system_prompt, user_prompt, output_format)

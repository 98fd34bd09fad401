"""Extractor - turns free-form completions into validated records.

Each prompt runs through a small state machine::

    ATTEMPTING --ok--> SUCCESS
        |
        +--failure--> RETRYING --(attempts left)--> ATTEMPTING
                          |
                          +--(none left)--> EXHAUSTED -> AttemptsExhaustedError

A single attempt composes the instruction, calls the completion service,
extracts blocks (quote repair only for blocks that do not parse as written)
and validates them. It never raises for an
ordinary failure: it returns an :class:`AttemptOutcome` carrying either the
records or the error, and the loop decides what happens next.
"""

from __future__ import annotations

import asyncio
import json
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from ..parsing.blocks import extract_records
from ..parsing.repair import repair_quotes
from ..prompt_builder import build_system_message
from ..providers.base import LLMAPIError, LLMClient, LLMResponse
from ..schemas.base import ExtractionResult, UsageInfo
from ..schemas.output_schema import OutputSchema
from ..utils.logger import get_logger
from ..validation import flatten_record, validate_record
from .config import ExtractionConfig
from .exceptions import (
    RECOVERABLE_ERRORS,
    AttemptsExhaustedError,
    ConfigurationError,
    ExtractionError,
    MissingFieldError,
    ServiceInvocationError,
    StrictOutputError,
)

logger = get_logger(__name__)

PromptBatch = Union[str, Sequence[str]]
SchemaLike = Union[OutputSchema, Mapping[str, Any]]

_FEEDBACK_HINTS = {
    ExtractionError: "Invalid JSON format. Output one JSON object per input, with every key and string value in double quotes.",
    MissingFieldError: "Every required key must appear in the JSON output.",
    ServiceInvocationError: "The previous request did not complete.",
}


class AttemptState(str, Enum):
    ATTEMPTING = "attempting"
    SUCCESS = "success"
    RETRYING = "retrying"
    EXHAUSTED = "exhausted"


@dataclass
class AttemptOutcome:
    """Result of one attempt: records on success, the error otherwise."""

    records: Optional[list[Any]] = None
    error: Optional[StrictOutputError] = None
    usage: Optional[UsageInfo] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AttemptContext:
    """Retry state for one prompt (or one combined batch).

    Attributes:
        max_attempts: Attempts allowed before exhaustion.
        remaining: Attempts not yet used.
        feedback: Error descriptions accumulated from failed attempts.
        last_error: Failure of the most recent attempt.
        state: Current position in the retry state machine.
    """

    max_attempts: int
    remaining: int = field(init=False)
    feedback: str = ""
    last_error: Optional[StrictOutputError] = None
    state: AttemptState = AttemptState.ATTEMPTING

    def __post_init__(self):
        self.remaining = self.max_attempts

    @property
    def attempts(self) -> int:
        return self.max_attempts - self.remaining

    @property
    def active(self) -> bool:
        return self.state in (AttemptState.ATTEMPTING, AttemptState.RETRYING)

    def begin(self) -> None:
        self.state = AttemptState.ATTEMPTING
        self.remaining -= 1

    def succeed(self) -> None:
        self.state = AttemptState.SUCCESS

    def fail(self, error: StrictOutputError) -> AttemptState:
        """Fold ``error`` into the feedback and move to RETRYING or EXHAUSTED."""
        self.last_error = error
        self.feedback += format_feedback(error)
        self.state = AttemptState.RETRYING if self.remaining > 0 else AttemptState.EXHAUSTED
        return self.state


def format_feedback(error: StrictOutputError) -> str:
    """Describe a failed attempt for the next instruction."""
    hint = ""
    for error_type, text in _FEEDBACK_HINTS.items():
        if isinstance(error, error_type):
            hint = f"\n{text}"
            break
    return f"\n\nError: {type(error).__name__}: {error.message}{hint}\nPlease try again."


class Extractor:
    """Schema-guided extraction over a completion service.

    Features:
      - Provider-agnostic via the LLMClient protocol (OpenAI default).
      - Lazy client initialisation (no import-time API key check).
      - Quote repair, nested-brace block extraction and enum coercion.
      - On any failure: error folded into the instruction and the prompt retried.

    Example:
        extractor = Extractor(client=OpenAIClient())
        record = extractor.run(
            "Classify the sentiment of the text.",
            "What a lovely day!",
            {"mood": ["happy", "sad"], "reason": "short justification"},
        )
    """

    def __init__(
        self,
        client: LLMClient | None = None,
        config: ExtractionConfig | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
    ):
        self.config = config or ExtractionConfig()
        self.api_key = api_key
        self.base_url = base_url
        self._client: LLMClient | None = client

    # -- client ----------------------------------------------------------

    def _resolve_client(self) -> LLMClient:
        """Lazily create or return the LLMClient."""
        if self._client is None:
            from ..providers.openai import OpenAIClient

            self._client = OpenAIClient(api_key=self.api_key, base_url=self.base_url)
        return self._client

    # -- public API ------------------------------------------------------

    def run(self, system_prompt: str, prompts: PromptBatch, schema: SchemaLike, **overrides: Any) -> Any:
        """Blocking entry point. Returns a record, or a list for a prompt sequence.

        Keyword overrides are any :class:`ExtractionConfig` field
        (``default_category``, ``output_value_only``, ``model``,
        ``temperature``, ``max_attempts``, ``verbose`` ...).

        Raises:
            AttemptsExhaustedError: A prompt failed on every attempt.
        """
        return self.extract(system_prompt, prompts, schema, **overrides).output

    async def run_async(self, system_prompt: str, prompts: PromptBatch, schema: SchemaLike, **overrides: Any) -> Any:
        """Async counterpart of :meth:`run`."""
        result = await self.extract_async(system_prompt, prompts, schema, **overrides)
        return result.output

    def extract(self, system_prompt: str, prompts: PromptBatch, schema: SchemaLike, **overrides: Any) -> ExtractionResult:
        """Like :meth:`run` but returns the full :class:`ExtractionResult`."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.extract_async(system_prompt, prompts, schema, **overrides))
        raise RuntimeError(
            "Extractor.run() cannot be called from inside an async context. "
            "Use 'await extractor.run_async(...)' instead."
        )

    async def extract_async(
        self,
        system_prompt: str,
        prompts: PromptBatch,
        schema: SchemaLike,
        **overrides: Any,
    ) -> ExtractionResult:
        config = self.config.replace(**overrides) if overrides else self.config
        output_schema = OutputSchema.coerce(schema)
        client = self._resolve_client()

        list_input = not isinstance(prompts, str)
        prompt_list = _normalize_prompts(prompts)
        usage = UsageInfo(model=config.model)

        if list_input and not prompt_list:
            return ExtractionResult(output=[], usage=usage)

        if list_input and config.batch_strategy == "combined":
            records, ctx, call_usage = await self._resolve(
                client, config, system_prompt, output_schema,
                user_text=json.dumps(prompt_list, ensure_ascii=False),
                list_input=True,
            )
            if len(records) != len(prompt_list):
                logger.warning(
                    "Combined batch returned %d record(s) for %d prompt(s); matching by position",
                    len(records), len(prompt_list),
                )
            return ExtractionResult(output=records, attempts=[ctx.attempts], usage=usage + call_usage)

        outputs: list[Any] = []
        attempts: list[int] = []
        for index, prompt in enumerate(prompt_list):
            records, ctx, call_usage = await self._resolve(
                client, config, system_prompt, output_schema,
                user_text=prompt,
                list_input=list_input,
                prompt_index=index if list_input else None,
            )
            outputs.append(records[0])
            attempts.append(ctx.attempts)
            usage = usage + call_usage

        output = outputs if list_input else outputs[0]
        return ExtractionResult(output=output, attempts=attempts, usage=usage)

    # -- retry loop ------------------------------------------------------

    async def _resolve(
        self,
        client: LLMClient,
        config: ExtractionConfig,
        system_prompt: str,
        schema: OutputSchema,
        user_text: str,
        list_input: bool,
        prompt_index: Optional[int] = None,
    ) -> tuple[list[Any], AttemptContext, UsageInfo]:
        """Drive the retry state machine for one unit of work."""
        ctx = AttemptContext(max_attempts=config.max_attempts)
        usage = UsageInfo(model=config.model)
        multiple = list_input and config.batch_strategy == "combined"

        while ctx.active:
            ctx.begin()
            outcome = await self._attempt(
                client, config, system_prompt, schema, user_text,
                list_input=list_input,
                multiple=multiple,
                feedback=ctx.feedback,
                prompt_index=prompt_index,
            )
            if outcome.usage is not None:
                usage = usage + outcome.usage

            if outcome.ok:
                ctx.succeed()
                return outcome.records, ctx, usage

            state = ctx.fail(outcome.error)
            logger.warning(
                "Extraction attempt %d/%d failed%s: %s",
                ctx.attempts, ctx.max_attempts,
                "" if prompt_index is None else f" for prompt {prompt_index}",
                outcome.error,
            )
            if state is AttemptState.RETRYING:
                await self._backoff(config, ctx)

        raise AttemptsExhaustedError(ctx.attempts, ctx.last_error, prompt_index=prompt_index) from ctx.last_error

    async def _attempt(
        self,
        client: LLMClient,
        config: ExtractionConfig,
        system_prompt: str,
        schema: OutputSchema,
        user_text: str,
        list_input: bool,
        multiple: bool,
        feedback: str,
        prompt_index: Optional[int],
    ) -> AttemptOutcome:
        """One compose -> invoke -> extract -> validate pass."""
        instruction = build_system_message(
            system_prompt, schema,
            list_input=list_input,
            per_element=list_input and not multiple,
            feedback=feedback,
        )
        self._trace(config, "Composed instruction:\n%s", instruction)

        messages = [
            {"role": "system", "content": instruction},
            {"role": "user", "content": user_text},
        ]
        try:
            response: LLMResponse = await client.complete(
                messages=messages,
                model=config.model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            )
        except Exception as exc:
            error = ServiceInvocationError(
                f"Completion service call failed: {type(exc).__name__}: {exc}",
                prompt_index=prompt_index,
            )
            error.__cause__ = exc
            return AttemptOutcome(error=error)

        self._trace(config, "Raw response:\n%s", response.content)
        if config.verbose:
            self._trace(config, "Repaired response:\n%s", repair_quotes(response.content))

        try:
            parsed = extract_records(response.content, list_input=multiple)
            records = []
            for position, record in enumerate(parsed):
                index = position if multiple else prompt_index
                validated = validate_record(record, schema, config.default_category, prompt_index=index)
                records.append(flatten_record(validated, schema) if config.output_value_only else validated)
        except RECOVERABLE_ERRORS as exc:
            return AttemptOutcome(error=exc, usage=response.usage)

        return AttemptOutcome(records=records, usage=response.usage)

    # -- helpers ---------------------------------------------------------

    @staticmethod
    async def _backoff(config: ExtractionConfig, ctx: AttemptContext) -> None:
        """Exponential back-off with jitter after a service failure."""
        if config.retry_base_delay <= 0 or not isinstance(ctx.last_error, ServiceInvocationError):
            return
        delay = config.retry_base_delay * (2 ** (ctx.attempts - 1))
        cause = ctx.last_error.__cause__
        if isinstance(cause, LLMAPIError) and cause.retry_after is not None:
            delay = max(delay, cause.retry_after)
        delay += random.uniform(0, delay * 0.25)
        logger.info("Retrying in %.1fs after service failure", delay)
        await asyncio.sleep(delay)

    @staticmethod
    def _trace(config: ExtractionConfig, msg: str, *args: Any) -> None:
        if config.verbose:
            logger.info(msg, *args)
        else:
            logger.debug(msg, *args)


def _normalize_prompts(prompts: PromptBatch) -> list[str]:
    if isinstance(prompts, str):
        return [prompts]
    prompt_list = list(prompts)
    for index, prompt in enumerate(prompt_list):
        if not isinstance(prompt, str):
            raise ConfigurationError(
                f"Prompts must be strings, got {type(prompt).__name__}",
                prompt_index=index,
            )
    return prompt_list

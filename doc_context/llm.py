"""Gemini client helpers for documentation summarisation."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from google import genai
from google.genai import errors, types
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .config import Settings
from .schemas import SummaryResult, SummaryStatus

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH_FOR_SUMMARY = 150_000
TRUNCATION_MARKER = "\n[Content truncated due to length]"

NO_CONTENT_MESSAGE = "No textual content found to summarize."
NO_VALID_RESPONSE_MESSAGE = "Summarization failed: No valid response text from model."

SUMMARY_PROMPT = """Analyze the following technical documentation (combined from multiple pages). Extract the essential information required for an AI coding agent to *learn how to implement features* using this library/framework. Focus specifically on:

1.  **Key API Usage:** Identify core functions, components, hooks, or classes. For each, provide:
    *   A brief description of its purpose.
    *   Its basic signature or essential props/parameters.
    *   A concise, typical code example demonstrating its use in context.
2.  **Core Implementation Patterns:** Describe the standard sequence of steps or code structure for common tasks (e.g., defining a route, fetching data, handling state, applying configuration). Include minimal code snippets for illustration.
3.  **Essential Configuration:** Detail any necessary setup, configuration files, or options required to use key features.
4.  **Critical Gotchas/Best Practices (Code-Level):** Mention any common coding errors, important considerations, or specific best practices directly related to writing code with this library.

Avoid high-level conceptual explanations or introductory marketing language. Prioritize actionable details and code examples relevant for code generation."""

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)
DEFAULT_SAFETY_SETTINGS = tuple(
    types.SafetySetting(
        category=category,
        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    )
    for category in SAFETY_CATEGORIES
)


@dataclass(frozen=True)
class ModelConfig:
    """Immutable handle on the configured Gemini model."""

    client: Any
    model: str
    safety_settings: tuple[types.SafetySetting, ...] = DEFAULT_SAFETY_SETTINGS

    @classmethod
    def from_settings(cls, settings: Settings) -> ModelConfig:
        return cls(client=genai.Client(api_key=settings.api_key), model=settings.model)

    def generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(safety_settings=list(self.safety_settings))


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, errors.ServerError):
        return True
    return isinstance(exc, errors.ClientError) and exc.code == 429


def _gemini_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(4),
        wait=wait_exponential(multiplier=2, min=1, max=16),
        retry=retry_if_exception(_is_transient),
    )


def _reason_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "name", None) or str(value)


def _block_reason(response: Any) -> Optional[str]:
    feedback = getattr(response, "prompt_feedback", None)
    return _reason_name(getattr(feedback, "block_reason", None))


def _finish_reason(response: Any) -> Optional[str]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    return _reason_name(getattr(candidates[0], "finish_reason", None))


def prepare_text(text: str) -> str:
    """Cut ``text`` to the summary length cap, marking any truncation."""
    if len(text) <= MAX_TEXT_LENGTH_FOR_SUMMARY:
        return text
    logger.info(
        "Truncating %d characters of documentation to %d",
        len(text),
        MAX_TEXT_LENGTH_FOR_SUMMARY,
    )
    return text[:MAX_TEXT_LENGTH_FOR_SUMMARY] + TRUNCATION_MARKER


def build_prompt(text: str) -> str:
    return f"{SUMMARY_PROMPT}:\n\n---\n{text}\n---"


@_gemini_retry()
def _generate(config: ModelConfig, prompt: str) -> Any:
    return config.client.models.generate_content(
        model=config.model,
        contents=prompt,
        config=config.generation_config(),
    )


def _blocked(reason: str) -> SummaryResult:
    return SummaryResult(
        SummaryStatus.BLOCKED,
        f"Summarization blocked due to safety settings: {reason}",
    )


def interpret_response(response: Any) -> SummaryResult:
    """Map a model response onto a :class:`SummaryResult`."""
    text = getattr(response, "text", None)
    if text:
        return SummaryResult(SummaryStatus.OK, text)

    logger.warning("Gemini response was empty or invalid.")
    block_reason = _block_reason(response)
    if block_reason:
        return _blocked(block_reason)
    finish_reason = _finish_reason(response)
    if finish_reason and finish_reason != "STOP":
        return SummaryResult(
            SummaryStatus.INCOMPLETE,
            f"Summarization failed: Model finished unexpectedly ({finish_reason}).",
        )
    return SummaryResult(SummaryStatus.EMPTY, NO_VALID_RESPONSE_MESSAGE)


def summarize_text(text: str, config: ModelConfig) -> SummaryResult:
    """Summarise crawled documentation with the configured model."""
    if not text or not text.strip():
        return SummaryResult(SummaryStatus.NO_CONTENT, NO_CONTENT_MESSAGE)

    prompt = build_prompt(prepare_text(text))
    start = time.perf_counter()
    try:
        response = _generate(config, prompt)
    except errors.APIError as exc:
        logger.exception("Gemini API error: %s", exc)
        block_reason = _block_reason(getattr(exc, "response", None))
        if block_reason:
            return _blocked(block_reason)
        detail = exc.message or exc.status or str(exc)
        return SummaryResult(
            SummaryStatus.FAILED,
            f"Failed to summarize text using Gemini: {detail}",
        )

    logger.info(
        "Generated Gemini summary with %s in %.2fs",
        config.model,
        time.perf_counter() - start,
    )
    return interpret_response(response)

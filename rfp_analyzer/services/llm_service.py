"""
LLM Service — centralized Groq Cloud LLM client.

Every model call in the service goes through this module:
  - get_llm()                → returns configured Groq ChatModel
  - llm_structured_call()    → schema-constrained call, (parsed, raw text)
  - llm_text_call()          → raw text response
  - classify_llm_exception() → map a provider error onto a RemoteFailure
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel

from rfp_analyzer.config import get_settings
from rfp_analyzer.errors import (
    ConfigurationError,
    RemoteFailure as RemoteFailureError,
    RemoteMalformed,
    RemoteQuotaExhausted,
    RemoteThrottled,
    RfpProcessingError,
)
from rfp_analyzer.models.enums import RemoteErrorKind
from rfp_analyzer.models.schemas import RemoteFailure

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

THROTTLED_MESSAGE = "Rate limits exceeded, please try again later."
QUOTA_MESSAGE = "Payment required, please add funds to your workspace."
FAILED_MESSAGE = "AI processing failed"

_llm_instance = None


def get_llm():
    """
    Return a configured Groq LLM client (singleton).
    Uses langchain-groq's ChatGroq.
    """
    global _llm_instance
    if _llm_instance is not None:
        return _llm_instance

    settings = get_settings()

    if not settings.groq_api_key:
        raise ConfigurationError("GROQ_API_KEY is not set in environment / .env file")

    from langchain_groq import ChatGroq

    _llm_instance = ChatGroq(
        api_key=settings.groq_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    logger.info(f"Initialized Groq LLM: {settings.llm_model}")
    return _llm_instance


# ── Failure classification ───────────────────────────────


def _status_code(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def classify_llm_exception(exc: BaseException) -> RemoteFailure:
    """429 → throttled, 402 → quota exhausted, anything else → failed."""
    status = _status_code(exc)
    if status == 429:
        kind = RemoteErrorKind.THROTTLED
    elif status == 402:
        kind = RemoteErrorKind.QUOTA_EXHAUSTED
    else:
        kind = RemoteErrorKind.FAILED
    return RemoteFailure(error=kind, status_code=status, message=str(exc))


def error_from_failure(failure: RemoteFailure) -> RfpProcessingError:
    """Build the exception a caller sees for a remote failure."""
    if failure.error == RemoteErrorKind.THROTTLED:
        return RemoteThrottled(THROTTLED_MESSAGE)
    if failure.error == RemoteErrorKind.QUOTA_EXHAUSTED:
        return RemoteQuotaExhausted(QUOTA_MESSAGE)
    if failure.error == RemoteErrorKind.MALFORMED:
        return RemoteMalformed(failure.message or "AI did not return valid JSON")
    suffix = f": {failure.status_code}" if failure.status_code else ""
    return RemoteFailureError(f"{FAILED_MESSAGE}{suffix}")


# ── Calls ────────────────────────────────────────────────


def llm_structured_call(
    system_prompt: str,
    user_prompt: str,
    output_model: Type[T],
) -> tuple[Optional[T], str]:
    """
    Call the LLM with the output forced through *output_model* as a tool.

    Returns ``(parsed, raw_text)``: *parsed* is None when the model
    answered in prose or its arguments failed validation, in which case
    *raw_text* carries whatever content came back. Provider errors
    propagate unchanged; use classify_llm_exception() on them.
    """
    logger.debug(
        f"[LLM-JSON] Prompt length: {len(system_prompt) + len(user_prompt)} chars | "
        f"Target model: {output_model.__name__}"
    )

    llm = get_llm()
    structured_llm = llm.with_structured_output(output_model, include_raw=True)

    t0 = time.perf_counter()
    response: dict[str, Any] = structured_llm.invoke(
        [("system", system_prompt), ("human", user_prompt)]
    )
    elapsed = time.perf_counter() - t0

    parsed = response.get("parsed")
    raw = response.get("raw")
    raw_text = getattr(raw, "content", "") or ""
    if not isinstance(raw_text, str):
        raw_text = str(raw_text)

    if response.get("parsing_error") is not None:
        logger.warning(f"[LLM-JSON] Structured output failed validation: {response['parsing_error']}")

    logger.info(
        f"[LLM-JSON] Response received in {elapsed:.2f}s | Model: {output_model.__name__} | "
        f"parsed={'yes' if parsed is not None else 'no'} | text={len(raw_text)} chars"
    )
    return parsed, raw_text


def llm_text_call(system_prompt: str, user_prompt: str) -> str:
    """
    Call the LLM and return the raw text response.
    Provider failures are raised as RemoteThrottled / RemoteQuotaExhausted /
    RemoteFailure; an empty reply raises RemoteMalformed.
    """
    logger.debug(f"[LLM-TEXT] Prompt length: {len(system_prompt) + len(user_prompt)} chars")
    logger.debug(f"[LLM-TEXT] Prompt preview:\n{user_prompt[:500]}{'…' if len(user_prompt) > 500 else ''}")

    llm = get_llm()

    t0 = time.perf_counter()
    try:
        response = llm.invoke([("system", system_prompt), ("human", user_prompt)])
    except Exception as exc:
        failure = classify_llm_exception(exc)
        logger.error(f"[LLM-TEXT] AI API error: {failure.status_code} {failure.message}")
        raise error_from_failure(failure) from exc
    elapsed = time.perf_counter() - t0

    content = response.content or ""
    meta = getattr(response, "response_metadata", {}) or {}
    finish_reason = meta.get("finish_reason", "unknown")
    usage = meta.get("token_usage") or meta.get("usage", {})
    logger.info(
        f"[LLM-TEXT] Response received in {elapsed:.2f}s | "
        f"Response length: {len(content)} chars | "
        f"finish_reason={finish_reason} | "
        f"tokens={usage}"
    )

    if not content.strip():
        raise RemoteMalformed("No content in AI response")
    return content

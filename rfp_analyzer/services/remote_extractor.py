"""
Remote Extraction Client — structured RFP extraction through the LLM.

Sends the (truncated) document text with a fixed extraction schema and
returns a tagged RemoteReply:
  - RemoteStructured  → the model filled the extraction tool
  - RemoteFreeText    → the model answered in prose instead
  - RemoteFailure     → throttled / quota exhausted / failed

resolve_remote_reply() turns any reply into an ExtractionResult or the
matching RfpProcessingError. Nothing is persisted here.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from rfp_analyzer.config import get_settings
from rfp_analyzer.errors import ConfigurationError
from rfp_analyzer.models.enums import Priority, RemoteErrorKind, RequirementCategory
from rfp_analyzer.models.schemas import (
    ExtractionResult,
    RemoteFailure,
    RemoteFreeText,
    RemoteReply,
    RemoteStructured,
    RequirementCandidate,
)
from rfp_analyzer.services.llm_service import (
    classify_llm_exception,
    error_from_failure,
    llm_structured_call,
)
from rfp_analyzer.services.normalizer import DateShape, normalize_date
from rfp_analyzer.services.pattern_extractor import is_mandatory

logger = logging.getLogger(__name__)

_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

_ISO_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")


# ── Extraction tool schema ───────────────────────────────


class ExtractedRequirement(BaseModel):
    requirement_text: str = Field(description="The requirement description")
    category: Optional[str] = Field(
        default=None,
        description="Technical, Qualification, Compliance, Deliverable, Operational or Financial",
    )
    is_mandatory: Optional[bool] = Field(default=None, description="Whether the requirement is mandatory")
    priority: Optional[str] = Field(default=None, description="low, medium, or high")


class RfpDataExtraction(BaseModel):
    """Extract structured RFP data from the document."""
    title: Optional[str] = Field(default=None, description="Project title")
    client_name: Optional[str] = Field(default=None, description="Client/organization name")
    description: Optional[str] = Field(default=None, description="Brief project description")
    deadline: Optional[str] = Field(default=None, description="Submission deadline, YYYY-MM-DD")
    budget_min: Optional[float] = Field(default=None, description="Minimum budget as a plain number")
    budget_max: Optional[float] = Field(default=None, description="Maximum budget as a plain number")
    currency: Optional[str] = Field(default=None, description="ISO 4217 currency code")
    required_technologies: list[str] = Field(
        default_factory=list, description="Required technologies/skills"
    )
    requirements: list[ExtractedRequirement] = Field(
        default_factory=list, description="Specific requirements found in the RFP"
    )


# ── Client ───────────────────────────────────────────────


class RemoteExtractionClient:
    """
    Wraps the structured LLM call for RFP extraction.

        reply  = RemoteExtractionClient().extract(text)
        result = resolve_remote_reply(reply)
    """

    def __init__(self, max_chars: int | None = None):
        self.max_chars = max_chars or get_settings().max_document_chars
        self.system_prompt = (_PROMPT_DIR / "extraction_system.txt").read_text(encoding="utf-8")
        self.user_template = (_PROMPT_DIR / "extraction_user.txt").read_text(encoding="utf-8")

    def build_prompts(self, text: str) -> tuple[str, str]:
        truncated = (text or "")[: self.max_chars]
        if len(text or "") > self.max_chars:
            logger.info(f"[REMOTE] Document truncated {len(text):,} → {self.max_chars:,} chars")
        return self.system_prompt, self.user_template.format(document_text=truncated)

    def extract(self, text: str) -> RemoteReply:
        system_prompt, user_prompt = self.build_prompts(text)
        try:
            parsed, raw_text = llm_structured_call(system_prompt, user_prompt, RfpDataExtraction)
        except ConfigurationError:
            raise
        except Exception as exc:
            failure = classify_llm_exception(exc)
            logger.error(f"[REMOTE] AI API error: {failure.status_code} {failure.message}")
            return failure

        if parsed is not None:
            result = to_extraction_result(parsed)
            logger.info(
                f"[REMOTE] Structured reply: {len(result.requirements)} requirements, "
                f"deadline={result.deadline}"
            )
            return RemoteStructured(result=result)

        if raw_text.strip():
            logger.warning(f"[REMOTE] Model answered in free text ({len(raw_text)} chars)")
            return RemoteFreeText(text=raw_text)

        logger.error("[REMOTE] Model returned neither a structured payload nor text")
        return RemoteFailure(
            error=RemoteErrorKind.MALFORMED,
            message="AI returned no structured payload",
        )


# ── Reply handling ───────────────────────────────────────


def resolve_remote_reply(reply: RemoteReply) -> ExtractionResult:
    """Return the remote ExtractionResult or raise the matching error."""
    if isinstance(reply, RemoteStructured):
        return reply.result

    if isinstance(reply, RemoteFreeText):
        result = parse_free_text(reply.text)
        if result is None:
            logger.error(f"[REMOTE] Failed to parse AI response as JSON: {reply.text[:200]!r}")
            raise error_from_failure(
                RemoteFailure(error=RemoteErrorKind.MALFORMED, message="AI did not return valid JSON")
            )
        return result

    if isinstance(reply, RemoteFailure):
        raise error_from_failure(reply)

    raise TypeError(f"Unexpected remote reply: {type(reply).__name__}")


def parse_free_text(text: str) -> Optional[ExtractionResult]:
    """Parse a prose reply that should contain the extraction JSON object."""
    body = text.strip()

    # Strip markdown code fences
    if body.startswith("```"):
        lines = [l for l in body.split("\n") if not l.strip().startswith("```")]
        body = "\n".join(lines)

    try:
        start = body.index("{")
        end = body.rindex("}") + 1
    except ValueError:
        return None

    try:
        data = json.loads(body[start:end])
    except json.JSONDecodeError as exc:
        logger.warning(f"[REMOTE] JSON parse error: {exc}")
        return None

    if not isinstance(data, dict):
        return None

    try:
        payload = RfpDataExtraction(**data)
    except ValidationError as exc:
        logger.warning(f"[REMOTE] JSON does not match the extraction schema: {exc}")
        return None
    return to_extraction_result(payload)


# ── Normalization helpers ────────────────────────────────


def to_extraction_result(payload: RfpDataExtraction) -> ExtractionResult:
    requirements: list[RequirementCandidate] = []
    for item in payload.requirements:
        text = (item.requirement_text or "").strip()
        if not text:
            continue
        mandatory = item.is_mandatory if item.is_mandatory is not None else is_mandatory(text)
        requirements.append(
            RequirementCandidate(
                text=text,
                category=normalize_category(item.category),
                priority=normalize_priority(item.priority, mandatory),
                is_mandatory=mandatory,
            )
        )

    return ExtractionResult(
        title=_clean(payload.title),
        client_name=_clean(payload.client_name),
        description=_clean(payload.description),
        deadline=normalize_remote_deadline(payload.deadline),
        budget_min=_non_negative(payload.budget_min),
        budget_max=_non_negative(payload.budget_max),
        currency=(_clean(payload.currency) or "").upper() or None,
        required_technologies=[t.strip() for t in payload.required_technologies if t and t.strip()],
        requirements=requirements,
    )


def normalize_category(value: Optional[str]) -> RequirementCategory:
    v = (value or "").strip().capitalize()
    try:
        return RequirementCategory(v)
    except ValueError:
        return RequirementCategory.TECHNICAL


def normalize_priority(value: Optional[str], mandatory: bool) -> Priority:
    v = (value or "").strip().lower()
    try:
        return Priority(v)
    except ValueError:
        return Priority.HIGH if mandatory else Priority.MEDIUM


def normalize_remote_deadline(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    m = _ISO_DATE_RE.match(value.strip())
    if m:
        return normalize_date(m.group(1), DateShape.NUMERIC)
    for shape in (DateShape.MONTH_NAME, DateShape.DAY_MONTH_NAME, DateShape.NUMERIC):
        iso = normalize_date(value, shape)
        if iso:
            return iso
    return None


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _non_negative(value: Optional[float]) -> Optional[float]:
    if value is None or value < 0:
        return None
    return value

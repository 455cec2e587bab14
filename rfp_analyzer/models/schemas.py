"""
Reusable data schemas for the extraction pipeline and the stored entities.
Each schema represents a clearly-bounded data object.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from .enums import (
    Priority,
    RemoteErrorKind,
    RequirementCategory,
    ResponseStatus,
    RfpStatus,
    SourceTier,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Intake ───────────────────────────────────────────────


class RawDocument(BaseModel):
    """Uploaded bytes plus best-effort decoded text (never persisted)."""
    content: bytes = Field(repr=False)
    text: str = ""
    sha256: str = ""
    decoder: str = ""  # "pymupdf" | "naive"


# ── Extraction ───────────────────────────────────────────


class RequirementCandidate(BaseModel):
    """A single requirement proposed by one of the extractors."""
    text: str = Field(min_length=1)
    category: RequirementCategory = RequirementCategory.TECHNICAL
    priority: Priority = Priority.MEDIUM
    is_mandatory: bool = False


class ExtractionResult(BaseModel):
    """Canonical shape produced by either extractor and by the merger."""
    title: Optional[str] = None
    client_name: Optional[str] = None
    deadline: Optional[str] = None  # ISO-8601 date, YYYY-MM-DD
    budget_min: Optional[float] = Field(default=None, ge=0)
    budget_max: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    description: Optional[str] = None
    required_technologies: list[str] = Field(default_factory=list)
    requirements: list[RequirementCandidate] = Field(default_factory=list)


# ── Remote reply (tagged) ────────────────────────────────


class RemoteStructured(BaseModel):
    kind: Literal["structured"] = "structured"
    result: ExtractionResult


class RemoteFreeText(BaseModel):
    kind: Literal["free_text"] = "free_text"
    text: str


class RemoteFailure(BaseModel):
    kind: Literal["failure"] = "failure"
    error: RemoteErrorKind
    status_code: Optional[int] = None
    message: str = ""


RemoteReply = Annotated[
    Union[RemoteStructured, RemoteFreeText, RemoteFailure],
    Field(discriminator="kind"),
]


# ── Reconciliation ───────────────────────────────────────


class MergeReport(BaseModel):
    """Merged record plus where each field was taken from."""
    result: ExtractionResult
    field_sources: dict[str, SourceTier] = Field(default_factory=dict)
    notes: list[str] = Field(default_factory=list)


class ProcessingOutcome(BaseModel):
    """What a processing invocation reports back to its caller."""
    rfp_id: str
    status: RfpStatus
    extracted: ExtractionResult
    field_sources: dict[str, SourceTier] = Field(default_factory=dict)
    merge_notes: list[str] = Field(default_factory=list)
    requirements_count: int = 0
    requirements_persisted: bool = False


# ── Stored entities ──────────────────────────────────────


class RfpRecord(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str = "Untitled RFP"
    status: RfpStatus = RfpStatus.PENDING
    document_url: Optional[str] = None
    client_name: Optional[str] = None
    deadline: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    currency: Optional[str] = "USD"
    description: Optional[str] = None
    required_technologies: list[str] = Field(default_factory=list)
    extracted_data: Optional[dict[str, Any]] = None
    compatibility_score: Optional[float] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class RequirementRow(BaseModel):
    id: str = Field(default_factory=_new_id)
    rfp_id: str
    requirement_text: str
    category: str = RequirementCategory.TECHNICAL.value
    priority: str = Priority.MEDIUM.value
    is_mandatory: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_candidate(cls, rfp_id: str, candidate: RequirementCandidate) -> "RequirementRow":
        return cls(
            rfp_id=rfp_id,
            requirement_text=candidate.text,
            category=candidate.category.value,
            priority=candidate.priority.value,
            is_mandatory=candidate.is_mandatory,
        )


class Company(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    industry: Optional[str] = None
    size: Optional[str] = None
    employee_count: Optional[int] = None
    available_funds: Optional[float] = None
    technologies: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    website: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class CompanyCapability(BaseModel):
    id: str = Field(default_factory=_new_id)
    company_id: str
    category: str
    capability: str
    proficiency_level: Optional[str] = None


class PastProject(BaseModel):
    id: str = Field(default_factory=_new_id)
    company_id: str
    project_name: str
    client_name: Optional[str] = None
    budget: Optional[float] = None
    technologies_used: list[str] = Field(default_factory=list)
    outcome: Optional[str] = None
    description: Optional[str] = None
    completion_date: Optional[str] = None


class ComplianceCheck(BaseModel):
    id: str = Field(default_factory=_new_id)
    rfp_id: str
    company_id: str
    requirement_id: Optional[str] = None
    status: Optional[str] = None
    match_score: Optional[float] = None
    notes: Optional[str] = None


class ResponseDraft(BaseModel):
    id: str = Field(default_factory=_new_id)
    rfp_id: str
    company_id: Optional[str] = None
    section_title: str
    draft_content: str = ""
    final_content: Optional[str] = None
    status: ResponseStatus = ResponseStatus.DRAFT
    created_at: datetime = Field(default_factory=_utcnow)


class UploadOutcome(BaseModel):
    """Result of an upload: the stored RFP plus how processing went."""
    rfp: RfpRecord
    processing: Optional[ProcessingOutcome] = None
    warning: Optional[str] = None


class RfpListing(BaseModel):
    """One dashboard row: the RFP plus counts of its related records."""
    rfp: RfpRecord
    requirements_count: int = 0
    compliance_checks_count: int = 0

"""
Shared fixtures: in-memory stand-ins for the MongoDB repository, the
blob store and the remote extraction client.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest

from rfp_analyzer.errors import PersistenceError, TransportFailure
from rfp_analyzer.models.enums import Priority, RequirementCategory
from rfp_analyzer.models.schemas import (
    Company,
    CompanyCapability,
    ComplianceCheck,
    ExtractionResult,
    PastProject,
    RemoteReply,
    RemoteStructured,
    RequirementCandidate,
    RequirementRow,
    ResponseDraft,
    RfpListing,
    RfpRecord,
)
from rfp_analyzer.services.file_service import DOCUMENT_BUCKET


SAMPLE_RFP_TEXT = """REQUEST FOR PROPOSAL
Issued by: City of Springfield
Deadline: 15/11/2025
Budget: $200,000 to $500,000

● Cloud hosting for the permit portal
● Migration of legacy permit records
● Monthly usage analytics dashboard
"""


class InMemoryRepository:
    """Same surface as RfpRepository, backed by dicts."""

    def __init__(self):
        self.rfps: dict[str, RfpRecord] = {}
        self.requirements: list[RequirementRow] = []
        self.companies: list[Company] = []
        self.capabilities: list[CompanyCapability] = []
        self.past_projects: list[PastProject] = []
        self.compliance_checks: list[ComplianceCheck] = []
        self.responses: list[ResponseDraft] = []
        self.update_calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_requirement_insert = False
        self.fail_rfp_update = False
        self.fail_response_insert = False

    # ── RFPs ─────────────────────────────────────────────

    def create_rfp(self, record: RfpRecord) -> RfpRecord:
        self.rfps[record.id] = record
        return record

    def get_rfp(self, rfp_id: str) -> Optional[RfpRecord]:
        return self.rfps.get(rfp_id)

    def list_rfps(self) -> list[RfpListing]:
        rfps = sorted(self.rfps.values(), key=lambda r: r.created_at, reverse=True)
        return [
            RfpListing(
                rfp=rfp,
                requirements_count=len(self.list_requirements(rfp.id)),
                compliance_checks_count=sum(1 for c in self.compliance_checks if c.rfp_id == rfp.id),
            )
            for rfp in rfps
        ]

    def set_document_url(self, rfp_id: str, document_url: str) -> None:
        self.update_rfp(rfp_id, {"document_url": document_url})

    def update_rfp(self, rfp_id: str, fields: dict[str, Any]) -> None:
        if self.fail_rfp_update:
            raise PersistenceError("Failed to update rfp: connection reset")
        self.update_calls.append((rfp_id, dict(fields)))
        current = self.rfps.get(rfp_id)
        data = current.model_dump() if current else {"id": rfp_id}
        data.update(fields)
        self.rfps[rfp_id] = RfpRecord(**data)

    # ── Requirements ─────────────────────────────────────

    def insert_requirements(self, rfp_id: str, candidates: list[RequirementCandidate]) -> int:
        if self.fail_requirement_insert:
            raise PersistenceError("Failed to insert requirements: write conflict")
        rows = [RequirementRow.from_candidate(rfp_id, c) for c in candidates]
        self.requirements.extend(rows)
        return len(rows)

    def list_requirements(self, rfp_id: str) -> list[RequirementRow]:
        return [r for r in self.requirements if r.rfp_id == rfp_id]

    # ── Company profile ──────────────────────────────────

    def create_company(self, company: Company) -> Company:
        self.companies.append(company)
        return company

    def get_company(self, company_id: str) -> Optional[Company]:
        return next((c for c in self.companies if c.id == company_id), None)

    def update_company(self, company_id: str, fields: dict[str, Any]) -> Optional[Company]:
        company = self.get_company(company_id)
        if company is None:
            return None
        updated = company.model_copy(update=fields)
        self.companies[self.companies.index(company)] = updated
        return updated

    def get_first_company(self) -> Optional[Company]:
        return self.companies[0] if self.companies else None

    def add_capability(self, capability: CompanyCapability) -> CompanyCapability:
        self.capabilities.append(capability)
        return capability

    def list_capabilities(self, company_id: str) -> list[CompanyCapability]:
        return [c for c in self.capabilities if c.company_id == company_id]

    def delete_capability(self, company_id: str, capability_id: str) -> bool:
        before = len(self.capabilities)
        self.capabilities = [
            c for c in self.capabilities
            if not (c.id == capability_id and c.company_id == company_id)
        ]
        return len(self.capabilities) < before

    def add_past_project(self, project: PastProject) -> PastProject:
        self.past_projects.append(project)
        return project

    def list_recent_past_projects(self, company_id: str, limit: int = 5) -> list[PastProject]:
        projects = [p for p in self.past_projects if p.company_id == company_id]
        projects.sort(key=lambda p: p.completion_date or "", reverse=True)
        return projects[:limit]

    def list_compliance_checks(self, rfp_id: str, company_id: str) -> list[ComplianceCheck]:
        return [
            c for c in self.compliance_checks
            if c.rfp_id == rfp_id and c.company_id == company_id
        ]

    # ── Responses ────────────────────────────────────────

    def insert_response(self, draft: ResponseDraft) -> ResponseDraft:
        if self.fail_response_insert:
            raise PersistenceError("Failed to insert response: disk full")
        self.responses.append(draft)
        return draft


class InMemoryFileService:
    """Same surface as FileService, backed by a dict."""

    def __init__(self):
        self.blobs: dict[str, bytes] = {}

    @staticmethod
    def document_key(rfp_id: str, filename: str) -> str:
        return f"{DOCUMENT_BUCKET}/{rfp_id}/{filename}"

    def save_file(self, file_bytes: bytes, key: str) -> str:
        self.blobs[key] = file_bytes
        return key

    def load_file(self, key: str) -> bytes:
        if key not in self.blobs:
            raise TransportFailure(f"Document not found in storage: {key}")
        return self.blobs[key]


class FakeRemoteClient:
    """Returns a preset RemoteReply and records the text it was given."""

    def __init__(self, reply: RemoteReply | None = None):
        self.reply = reply or RemoteStructured(result=ExtractionResult())
        self.calls: list[str] = []

    def extract(self, text: str) -> RemoteReply:
        self.calls.append(text)
        return self.reply


def remote_result(**overrides) -> ExtractionResult:
    """A typical structured extraction from the model."""
    data = dict(
        title="Permit Portal Modernization",
        client_name="City of Springfield",
        deadline="2025-11-15",
        budget_min=250000.0,
        budget_max=450000.0,
        currency="USD",
        description="Replace the legacy permit portal.",
        required_technologies=["Python", "PostgreSQL"],
        requirements=[
            RequirementCandidate(
                text="The vendor must host the portal in a certified cloud region",
                category=RequirementCategory.COMPLIANCE,
                priority=Priority.HIGH,
                is_mandatory=True,
            ),
            RequirementCandidate(
                text="Provide a monthly usage analytics dashboard",
                category=RequirementCategory.DELIVERABLE,
                priority=Priority.MEDIUM,
                is_mandatory=False,
            ),
        ],
    )
    data.update(overrides)
    return ExtractionResult(**data)


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def files() -> InMemoryFileService:
    return InMemoryFileService()


@pytest.fixture
def stored_rfp(repository, files) -> RfpRecord:
    """An uploaded, still-pending RFP whose blob holds SAMPLE_RFP_TEXT."""
    record = repository.create_rfp(RfpRecord(title="Permit Portal RFP"))
    key = files.save_file(SAMPLE_RFP_TEXT.encode("utf-8"), files.document_key(record.id, "rfp.pdf"))
    repository.set_document_url(record.id, key)
    return repository.get_rfp(record.id)

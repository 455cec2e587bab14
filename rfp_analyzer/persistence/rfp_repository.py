"""
RFP Repository — document storage for RFPs, requirements, company
profiles and drafted responses.

Each entity lives in its own collection keyed by ``_id`` = entity id.
Every pymongo failure is re-raised as PersistenceError; deciding whether
a failure is fatal is the caller's job.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from rfp_analyzer.errors import PersistenceError
from rfp_analyzer.models.schemas import (
    Company,
    CompanyCapability,
    ComplianceCheck,
    PastProject,
    RequirementCandidate,
    RequirementRow,
    ResponseDraft,
    RfpListing,
    RfpRecord,
)
from rfp_analyzer.persistence.mongo_client import MongoClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

RFPS = "rfps"
REQUIREMENTS = "rfp_requirements"
COMPANIES = "companies"
CAPABILITIES = "company_capabilities"
PAST_PROJECTS = "past_projects"
COMPLIANCE_CHECKS = "compliance_checks"
RESPONSES = "rfp_responses"

RECENT_PROJECTS_LIMIT = 5


def to_document(model: BaseModel) -> dict[str, Any]:
    doc = model.model_dump(mode="json")
    doc["_id"] = doc.pop("id")
    return doc


def from_document(model_cls: Type[M], doc: Optional[dict[str, Any]]) -> Optional[M]:
    if doc is None:
        return None
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return model_cls(**data)


class RfpRepository:
    """
    Collection-level operations used by the pipeline, the proposal
    drafting service and the API.

        repo = RfpRepository()                # connects from settings
        repo = RfpRepository(database=db)     # any pymongo Database
    """

    def __init__(self, database: Any = None):
        self._db = database if database is not None else MongoClient().get_database()

    # ── RFPs ─────────────────────────────────────────────

    def create_rfp(self, record: RfpRecord) -> RfpRecord:
        self._run("create rfp", lambda: self._db[RFPS].insert_one(to_document(record)))
        logger.info(f"[PERSIST] Created RFP {record.id} ({record.title!r})")
        return record

    def get_rfp(self, rfp_id: str) -> Optional[RfpRecord]:
        doc = self._run("load rfp", lambda: self._db[RFPS].find_one({"_id": rfp_id}))
        return from_document(RfpRecord, doc)

    def list_rfps(self) -> list[RfpListing]:
        """All RFPs, newest first, with requirement and compliance-check counts."""
        docs = self._run(
            "list rfps",
            lambda: list(self._db[RFPS].find().sort("created_at", DESCENDING)),
        )
        listings = []
        for doc in docs:
            rfp = from_document(RfpRecord, doc)
            counts = self._run(
                "count rfp records",
                lambda: (
                    self._db[REQUIREMENTS].count_documents({"rfp_id": rfp.id}),
                    self._db[COMPLIANCE_CHECKS].count_documents({"rfp_id": rfp.id}),
                ),
            )
            listings.append(RfpListing(
                rfp=rfp,
                requirements_count=counts[0],
                compliance_checks_count=counts[1],
            ))
        return listings

    def set_document_url(self, rfp_id: str, document_url: str) -> None:
        self.update_rfp(rfp_id, {"document_url": document_url})

    def update_rfp(self, rfp_id: str, fields: dict[str, Any]) -> None:
        """Upsert-by-id of the given fields; repeated calls converge."""
        changes = dict(fields)
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        self._run(
            "update rfp",
            lambda: self._db[RFPS].update_one({"_id": rfp_id}, {"$set": changes}, upsert=True),
        )
        logger.info(f"[PERSIST] Updated RFP {rfp_id}: {sorted(fields)}")

    # ── Requirements ─────────────────────────────────────

    def insert_requirements(self, rfp_id: str, candidates: list[RequirementCandidate]) -> int:
        if not candidates:
            return 0
        rows = [to_document(RequirementRow.from_candidate(rfp_id, c)) for c in candidates]
        self._run("insert requirements", lambda: self._db[REQUIREMENTS].insert_many(rows))
        logger.info(f"[PERSIST] Inserted {len(rows)} requirements for RFP {rfp_id}")
        return len(rows)

    def list_requirements(self, rfp_id: str) -> list[RequirementRow]:
        docs = self._run(
            "list requirements",
            lambda: list(self._db[REQUIREMENTS].find({"rfp_id": rfp_id}).sort("created_at", 1)),
        )
        return [from_document(RequirementRow, d) for d in docs]

    # ── Company profile ──────────────────────────────────

    def create_company(self, company: Company) -> Company:
        self._run("create company", lambda: self._db[COMPANIES].insert_one(to_document(company)))
        logger.info(f"[PERSIST] Created company {company.id} ({company.name!r})")
        return company

    def get_company(self, company_id: str) -> Optional[Company]:
        doc = self._run("load company", lambda: self._db[COMPANIES].find_one({"_id": company_id}))
        return from_document(Company, doc)

    def update_company(self, company_id: str, fields: dict[str, Any]) -> Optional[Company]:
        """Apply *fields* to an existing company; None when it does not exist."""
        if not fields:
            return self.get_company(company_id)
        doc = self._run(
            "update company",
            lambda: self._db[COMPANIES].find_one_and_update(
                {"_id": company_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            ),
        )
        if doc is not None:
            logger.info(f"[PERSIST] Updated company {company_id}: {sorted(fields)}")
        return from_document(Company, doc)

    def get_first_company(self) -> Optional[Company]:
        doc = self._run(
            "load company",
            lambda: self._db[COMPANIES].find_one({}, sort=[("created_at", 1)]),
        )
        return from_document(Company, doc)

    def add_capability(self, capability: CompanyCapability) -> CompanyCapability:
        self._run(
            "add capability",
            lambda: self._db[CAPABILITIES].insert_one(to_document(capability)),
        )
        return capability

    def list_capabilities(self, company_id: str) -> list[CompanyCapability]:
        docs = self._run(
            "list capabilities",
            lambda: list(self._db[CAPABILITIES].find({"company_id": company_id})),
        )
        return [from_document(CompanyCapability, d) for d in docs]

    def delete_capability(self, company_id: str, capability_id: str) -> bool:
        result = self._run(
            "delete capability",
            lambda: self._db[CAPABILITIES].delete_one(
                {"_id": capability_id, "company_id": company_id}
            ),
        )
        return result.deleted_count > 0

    def add_past_project(self, project: PastProject) -> PastProject:
        self._run(
            "add past project",
            lambda: self._db[PAST_PROJECTS].insert_one(to_document(project)),
        )
        return project

    def list_recent_past_projects(
        self, company_id: str, limit: int = RECENT_PROJECTS_LIMIT
    ) -> list[PastProject]:
        docs = self._run(
            "list past projects",
            lambda: list(
                self._db[PAST_PROJECTS]
                .find({"company_id": company_id})
                .sort("completion_date", DESCENDING)
                .limit(limit)
            ),
        )
        return [from_document(PastProject, d) for d in docs]

    def list_compliance_checks(self, rfp_id: str, company_id: str) -> list[ComplianceCheck]:
        docs = self._run(
            "list compliance checks",
            lambda: list(
                self._db[COMPLIANCE_CHECKS].find({"rfp_id": rfp_id, "company_id": company_id})
            ),
        )
        return [from_document(ComplianceCheck, d) for d in docs]

    # ── Responses ────────────────────────────────────────

    def insert_response(self, draft: ResponseDraft) -> ResponseDraft:
        self._run("insert response", lambda: self._db[RESPONSES].insert_one(to_document(draft)))
        logger.info(
            f"[PERSIST] Stored response {draft.id} ({draft.section_title!r}) for RFP {draft.rfp_id}"
        )
        return draft

    # ── Helpers ──────────────────────────────────────────

    @staticmethod
    def _run(action: str, op):
        try:
            return op()
        except PyMongoError as exc:
            logger.error(f"[PERSIST] Failed to {action}: {exc}")
            raise PersistenceError(f"Failed to {action}: {exc}") from exc

"""
Proposal Service — drafts proposal responses for an RFP with the LLM.

Two flavours:
  - generate_response(rfp_id, company_id) → "Complete Proposal"
    (seven fixed sections, JSON context, a failed store is fatal)
  - generate_template(rfp_id) → "AI Generated Response"
    (eight-part template, text context, a failed store is only logged)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from rfp_analyzer.errors import InputError, PersistenceError
from rfp_analyzer.models.enums import ResponseStatus
from rfp_analyzer.models.schemas import (
    Company,
    CompanyCapability,
    PastProject,
    RequirementRow,
    ResponseDraft,
    RfpRecord,
)
from rfp_analyzer.services.llm_service import llm_text_call

logger = logging.getLogger(__name__)

_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

COMPLETE_PROPOSAL_TITLE = "Complete Proposal"
TEMPLATE_RESPONSE_TITLE = "AI Generated Response"
MISSING_PROFILE_MESSAGE = "Please complete your company profile first"


def _load_prompt(name: str) -> str:
    return (_PROMPT_DIR / name).read_text(encoding="utf-8")


class ProposalService:
    """Builds LLM context from stored data and records the drafted response."""

    def __init__(self, repository):
        self.repository = repository

    # ── Complete proposal ────────────────────────────────

    def generate_response(self, rfp_id: str, company_id: str) -> ResponseDraft:
        rfp = self._require_rfp(rfp_id)
        if not company_id:
            raise InputError("Company ID is required")
        company = self.repository.get_company(company_id)
        if company is None:
            raise InputError(f"Company not found: {company_id}", status_code=404)

        logger.info(f"[PROPOSAL] Fetching company context for {company.name!r}")
        capabilities = self.repository.list_capabilities(company_id)
        past_projects = self.repository.list_recent_past_projects(company_id)
        compliance = self.repository.list_compliance_checks(rfp_id, company_id)

        user_prompt = _load_prompt("proposal_user.txt").format(
            rfp_json=_to_json(rfp),
            company_json=_to_json(company),
            capabilities_json=_to_json(capabilities),
            past_projects_json=_to_json(past_projects),
            compliance_json=_to_json(compliance),
        )

        logger.info(f"[PROPOSAL] Generating complete proposal for RFP {rfp_id}")
        content = llm_text_call(_load_prompt("proposal_system.txt"), user_prompt)

        draft = ResponseDraft(
            rfp_id=rfp_id,
            company_id=company_id,
            section_title=COMPLETE_PROPOSAL_TITLE,
            draft_content=content,
            status=ResponseStatus.DRAFT,
        )
        return self.repository.insert_response(draft)

    # ── Template response ────────────────────────────────

    def generate_template(self, rfp_id: str) -> ResponseDraft:
        rfp = self._require_rfp(rfp_id)
        requirements = self.repository.list_requirements(rfp_id)

        company = self.repository.get_first_company()
        if company is None:
            raise InputError(MISSING_PROFILE_MESSAGE)
        capabilities = self.repository.list_capabilities(company.id)
        past_projects = self.repository.list_recent_past_projects(company.id)

        user_prompt = _load_prompt("template_user.txt").format(
            company_context=build_company_context(company, capabilities, past_projects),
            rfp_context=build_rfp_context(rfp, requirements),
        )

        logger.info(f"[PROPOSAL] Generating response template for RFP {rfp_id}")
        content = llm_text_call(_load_prompt("template_system.txt"), user_prompt)
        logger.info("[PROPOSAL] Template generated successfully")

        draft = ResponseDraft(
            rfp_id=rfp_id,
            company_id=company.id,
            section_title=TEMPLATE_RESPONSE_TITLE,
            draft_content=content,
            status=ResponseStatus.DRAFT,
        )
        try:
            self.repository.insert_response(draft)
        except PersistenceError as exc:
            logger.error(f"[PROPOSAL] Could not store template for RFP {rfp_id}: {exc}")
        return draft

    # ── Helpers ──────────────────────────────────────────

    def _require_rfp(self, rfp_id: str) -> RfpRecord:
        if not rfp_id:
            raise InputError("RFP ID is required")
        rfp = self.repository.get_rfp(rfp_id)
        if rfp is None:
            raise InputError(f"RFP not found: {rfp_id}", status_code=404)
        return rfp


# ── Context rendering ────────────────────────────────────


def build_company_context(
    company: Company,
    capabilities: list[CompanyCapability],
    past_projects: list[PastProject],
) -> str:
    size = f"{company.employee_count} employees" if company.employee_count else "Not specified"
    funds = _money(company.available_funds) if company.available_funds else "Not specified"

    capability_lines = "\n".join(
        f"- {c.category}: {c.capability} ({c.proficiency_level or 'unspecified'})"
        for c in capabilities
    ) or "No capabilities listed"

    project_lines = "\n\n".join(
        f"- {p.project_name} for {p.client_name or 'undisclosed client'}\n"
        f"  Budget: {_money(p.budget) if p.budget is not None else 'undisclosed'}\n"
        f"  Technologies: {', '.join(p.technologies_used) or 'N/A'}\n"
        f"  Outcome: {p.outcome or 'N/A'}"
        for p in past_projects
    ) or "No past projects listed"

    return (
        f"Company: {company.name}\n"
        f"Industry: {company.industry or 'Not specified'}\n"
        f"Size: {size}\n"
        f"Available Funds: {funds}\n"
        f"Technologies: {', '.join(company.technologies) or 'None specified'}\n"
        f"Description: {company.description or 'Not provided'}\n"
        f"\nCapabilities:\n{capability_lines}\n"
        f"\nPast Projects:\n{project_lines}\n"
    )


def build_rfp_context(rfp: RfpRecord, requirements: list[RequirementRow]) -> str:
    if rfp.budget_min is not None and rfp.budget_max is not None:
        budget = f"{_money(rfp.budget_min)} - {_money(rfp.budget_max)}"
    else:
        budget = "Not specified"

    requirement_lines = "\n".join(
        f"- [{'MANDATORY' if r.is_mandatory else 'Optional'}] {r.requirement_text} "
        f"({r.category}, Priority: {r.priority})"
        for r in requirements
    ) or "No requirements listed"

    return (
        f"RFP: {rfp.title}\n"
        f"Client: {rfp.client_name or 'Not specified'}\n"
        f"Deadline: {rfp.deadline or 'Not specified'}\n"
        f"Budget: {budget}\n"
        f"Description: {rfp.description or 'Not provided'}\n"
        f"Required Technologies: {', '.join(rfp.required_technologies) or 'Not specified'}\n"
        f"\nRequirements:\n{requirement_lines}\n"
    )


def _money(value: float) -> str:
    return f"${value:,.0f}"


def _to_json(value: Any) -> str:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
    return json.dumps(value, indent=2, ensure_ascii=False)

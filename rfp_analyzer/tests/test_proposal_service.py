"""
Tests: proposal drafting. llm_text_call is replaced with monkeypatch.

Run with:
    pytest rfp_analyzer/tests/test_proposal_service.py -v
"""

import pytest

from rfp_analyzer import errors
from rfp_analyzer.models.enums import Priority, RequirementCategory, ResponseStatus
from rfp_analyzer.models.schemas import (
    Company,
    CompanyCapability,
    ComplianceCheck,
    PastProject,
    RequirementCandidate,
    RequirementRow,
    RfpRecord,
)
from rfp_analyzer.services.proposal_service import (
    COMPLETE_PROPOSAL_TITLE,
    MISSING_PROFILE_MESSAGE,
    TEMPLATE_RESPONSE_TITLE,
    ProposalService,
    build_company_context,
    build_rfp_context,
)

_PATCH_TARGET = "rfp_analyzer.services.proposal_service.llm_text_call"


@pytest.fixture
def prompts(monkeypatch):
    calls = []

    def fake_llm(system_prompt, user_prompt):
        calls.append((system_prompt, user_prompt))
        return "## Executive Summary\nWe are the right partner."

    monkeypatch.setattr(_PATCH_TARGET, fake_llm)
    return calls


@pytest.fixture
def company(repository):
    company = repository.create_company(Company(
        name="Acme Digital",
        industry="Government IT",
        employee_count=120,
        available_funds=2_000_000,
        technologies=["Python", "AWS"],
    ))
    repository.add_capability(CompanyCapability(
        company_id=company.id, category="Cloud", capability="AWS migrations", proficiency_level="expert",
    ))
    for i in range(7):
        repository.add_past_project(PastProject(
            company_id=company.id,
            project_name=f"Project {i}",
            client_name="County of Shelby",
            budget=100000 + i,
            completion_date=f"202{i}-06-30",
        ))
    return company


@pytest.fixture
def rfp(repository):
    record = repository.create_rfp(RfpRecord(
        title="Permit Portal Modernization",
        client_name="City of Springfield",
        budget_min=200000,
        budget_max=500000,
        required_technologies=["Python"],
    ))
    repository.insert_requirements(record.id, [
        RequirementCandidate(
            text="Vendor must provide 24/7 support",
            category=RequirementCategory.OPERATIONAL,
            priority=Priority.HIGH,
            is_mandatory=True,
        ),
        RequirementCandidate(text="Dashboards for permit volumes"),
    ])
    return record


class TestGenerateResponse:
    def test_stores_complete_proposal(self, repository, company, rfp, prompts):
        repository.compliance_checks.append(ComplianceCheck(
            rfp_id=rfp.id, company_id=company.id, status="met", notes="ISO 27001 held",
        ))

        draft = ProposalService(repository).generate_response(rfp.id, company.id)

        assert draft.section_title == COMPLETE_PROPOSAL_TITLE
        assert draft.status == ResponseStatus.DRAFT
        assert draft.draft_content.startswith("## Executive Summary")
        assert repository.responses == [draft]

        system_prompt, user_prompt = prompts[0]
        assert "Why Choose Us" in system_prompt
        assert "Acme Digital" in user_prompt
        assert "ISO 27001 held" in user_prompt

    def test_only_five_most_recent_projects(self, repository, company, rfp, prompts):
        ProposalService(repository).generate_response(rfp.id, company.id)
        user_prompt = prompts[0][1]
        assert "Project 6" in user_prompt
        assert "Project 2" in user_prompt
        assert "Project 1" not in user_prompt

    def test_unknown_company(self, repository, rfp, prompts):
        with pytest.raises(errors.InputError) as exc_info:
            ProposalService(repository).generate_response(rfp.id, "missing")
        assert exc_info.value.status_code == 404
        assert prompts == []

    def test_unknown_rfp(self, repository, company, prompts):
        with pytest.raises(errors.InputError, match="RFP not found"):
            ProposalService(repository).generate_response("missing", company.id)

    def test_store_failure_is_fatal(self, repository, company, rfp, prompts):
        repository.fail_response_insert = True
        with pytest.raises(errors.PersistenceError):
            ProposalService(repository).generate_response(rfp.id, company.id)

    def test_llm_errors_propagate(self, repository, company, rfp, monkeypatch):
        def throttled(system_prompt, user_prompt):
            raise errors.RemoteThrottled("Rate limits exceeded, please try again later.")

        monkeypatch.setattr(_PATCH_TARGET, throttled)
        with pytest.raises(errors.RemoteThrottled):
            ProposalService(repository).generate_response(rfp.id, company.id)
        assert repository.responses == []


class TestGenerateTemplate:
    def test_stores_template_response(self, repository, company, rfp, prompts):
        draft = ProposalService(repository).generate_template(rfp.id)

        assert draft.section_title == TEMPLATE_RESPONSE_TITLE
        assert draft.company_id == company.id
        assert repository.responses == [draft]

        user_prompt = prompts[0][1]
        assert "TEMPLATE STRUCTURE" in user_prompt
        assert "Company: Acme Digital" in user_prompt
        assert "- [MANDATORY] Vendor must provide 24/7 support (Operational, Priority: high)" in user_prompt
        assert "- [Optional] Dashboards for permit volumes (Technical, Priority: medium)" in user_prompt

    def test_requires_company_profile(self, repository, rfp, prompts):
        with pytest.raises(errors.InputError, match=MISSING_PROFILE_MESSAGE):
            ProposalService(repository).generate_template(rfp.id)
        assert prompts == []

    def test_store_failure_only_logged(self, repository, company, rfp, prompts):
        repository.fail_response_insert = True
        draft = ProposalService(repository).generate_template(rfp.id)
        assert draft.draft_content.startswith("## Executive Summary")
        assert repository.responses == []

    def test_missing_rfp_id(self, repository, prompts):
        with pytest.raises(errors.InputError, match="RFP ID is required"):
            ProposalService(repository).generate_template("")


class TestContextRendering:
    def test_rfp_context_budget(self):
        rfp = RfpRecord(title="Bridge", budget_min=200000, budget_max=500000)
        assert "Budget: $200,000 - $500,000" in build_rfp_context(rfp, [])

    def test_rfp_context_partial_budget(self):
        rfp = RfpRecord(title="Bridge", budget_max=500000)
        context = build_rfp_context(rfp, [])
        assert "Budget: Not specified" in context
        assert "No requirements listed" in context

    def test_rfp_context_requirement_row(self):
        row = RequirementRow(rfp_id="r1", requirement_text="Insurance bond required", category="Financial",
                             priority="high", is_mandatory=True)
        context = build_rfp_context(RfpRecord(title="Bridge"), [row])
        assert "- [MANDATORY] Insurance bond required (Financial, Priority: high)" in context

    def test_company_context_defaults(self):
        context = build_company_context(Company(name="Solo LLC"), [], [])
        assert "Size: Not specified" in context
        assert "Available Funds: Not specified" in context
        assert "No capabilities listed" in context
        assert "No past projects listed" in context

    def test_company_context_projects(self):
        company = Company(name="Acme", employee_count=12, available_funds=1500000)
        project = PastProject(company_id=company.id, project_name="Roads", budget=250000,
                              technologies_used=["GIS"])
        context = build_company_context(company, [], [project])
        assert "Size: 12 employees" in context
        assert "Available Funds: $1,500,000" in context
        assert "- Roads for undisclosed client" in context
        assert "Budget: $250,000" in context
        assert "Technologies: GIS" in context

"""
Company profile routes — the data proposal drafting draws on.

Routes:
  POST /api/companies                          → Create a company profile
  GET  /api/companies/{company_id}             → Profile, capabilities, past projects
  PATCH /api/companies/{company_id}            → Update profile fields
  POST /api/companies/{company_id}/capabilities
  DELETE /api/companies/{company_id}/capabilities/{capability_id}
  POST /api/companies/{company_id}/past-projects
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from rfp_analyzer.api.dependencies import get_repository
from rfp_analyzer.errors import InputError
from rfp_analyzer.models.schemas import Company, CompanyCapability, PastProject

logger = logging.getLogger(__name__)

company_router = APIRouter(prefix="/api/companies", tags=["Companies"])


# ── Request / response schemas ───────────────────────────
class CompanyCreate(BaseModel):
    name: str = Field(min_length=1)
    industry: Optional[str] = None
    size: Optional[str] = None
    employee_count: Optional[int] = None
    available_funds: Optional[float] = None
    technologies: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    website: Optional[str] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    industry: Optional[str] = None
    size: Optional[str] = None
    employee_count: Optional[int] = None
    available_funds: Optional[float] = None
    technologies: Optional[list[str]] = None
    description: Optional[str] = None
    website: Optional[str] = None


class CapabilityCreate(BaseModel):
    category: str
    capability: str
    proficiency_level: Optional[str] = None


class PastProjectCreate(BaseModel):
    project_name: str = Field(min_length=1)
    client_name: Optional[str] = None
    budget: Optional[float] = None
    technologies_used: list[str] = Field(default_factory=list)
    outcome: Optional[str] = None
    description: Optional[str] = None
    completion_date: Optional[str] = None


class CompanyProfileResponse(BaseModel):
    company: Company
    capabilities: list[CompanyCapability]
    past_projects: list[PastProject]


# ── Routes ───────────────────────────────────────────────

@company_router.post("", response_model=Company, status_code=201)
def create_company(body: CompanyCreate, repository=Depends(get_repository)):
    return repository.create_company(Company(**body.model_dump()))


@company_router.get("/{company_id}", response_model=CompanyProfileResponse)
def get_company(company_id: str, repository=Depends(get_repository)):
    company = _require_company(repository, company_id)
    return CompanyProfileResponse(
        company=company,
        capabilities=repository.list_capabilities(company_id),
        past_projects=repository.list_recent_past_projects(company_id),
    )


@company_router.patch("/{company_id}", response_model=Company)
def update_company(company_id: str, body: CompanyUpdate, repository=Depends(get_repository)):
    fields = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    company = repository.update_company(company_id, fields)
    if company is None:
        raise InputError(f"Company not found: {company_id}", status_code=404)
    return company


@company_router.post("/{company_id}/capabilities", response_model=CompanyCapability, status_code=201)
def add_capability(company_id: str, body: CapabilityCreate, repository=Depends(get_repository)):
    _require_company(repository, company_id)
    return repository.add_capability(CompanyCapability(company_id=company_id, **body.model_dump()))


@company_router.delete("/{company_id}/capabilities/{capability_id}", status_code=204)
def delete_capability(company_id: str, capability_id: str, repository=Depends(get_repository)):
    if not repository.delete_capability(company_id, capability_id):
        raise InputError(f"Capability not found: {capability_id}", status_code=404)
    return Response(status_code=204)


@company_router.post("/{company_id}/past-projects", response_model=PastProject, status_code=201)
def add_past_project(company_id: str, body: PastProjectCreate, repository=Depends(get_repository)):
    _require_company(repository, company_id)
    return repository.add_past_project(PastProject(company_id=company_id, **body.model_dump()))


def _require_company(repository, company_id: str) -> Company:
    company = repository.get_company(company_id)
    if company is None:
        raise InputError(f"Company not found: {company_id}", status_code=404)
    return company

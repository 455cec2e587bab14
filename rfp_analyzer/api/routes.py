"""
API routes — thin HTTP layer that delegates to the services.

Routes:
  GET  /health                              → API health check
  GET  /api/rfp                             → All RFPs, newest first, with counts
  POST /api/rfp/upload                      → Upload an RFP PDF and process it
  POST /api/rfp/{rfp_id}/process            → (Re)run extraction for an RFP
  GET  /api/rfp/{rfp_id}                    → RFP with its requirements
  POST /api/rfp/{rfp_id}/response           → Draft a complete proposal
  POST /api/rfp/{rfp_id}/response-template  → Draft from the eight-part template
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from rfp_analyzer.api.dependencies import (
    get_intake_service,
    get_pipeline,
    get_proposal_service,
    get_repository,
)
from rfp_analyzer.errors import InputError
from rfp_analyzer.models.schemas import ProcessingOutcome, RequirementRow, RfpListing, RfpRecord

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
rfp_router = APIRouter(prefix="/api/rfp", tags=["RFP"])


# ── Response schemas ─────────────────────────────────────
class UploadResponse(BaseModel):
    rfp_id: str
    status: str
    message: str
    warning: Optional[str] = None
    processing: Optional[ProcessingOutcome] = None


class RfpDetailResponse(BaseModel):
    rfp: RfpRecord
    requirements: list[RequirementRow]


class ResponseRequest(BaseModel):
    company_id: str


class DraftResponse(BaseModel):
    success: bool = True
    response_id: str
    section_title: str
    content: str


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Listing ──────────────────────────────────────────────

@rfp_router.get("", response_model=list[RfpListing])
def list_rfps(repository=Depends(get_repository)):
    return repository.list_rfps()


# ── Upload & process ─────────────────────────────────────

@rfp_router.post("/upload", response_model=UploadResponse)
async def upload_rfp(
    title: str = Form(...),
    file: UploadFile = File(...),
    intake=Depends(get_intake_service),
):
    """Store an RFP PDF and run extraction on it before returning."""
    filename = file.filename or "document.pdf"
    data = await file.read()
    outcome = await run_in_threadpool(intake.upload, title, filename, data, file.content_type)

    if outcome.warning:
        message = "RFP uploaded. Processing did not complete."
    else:
        message = "RFP uploaded and processed successfully"
    return UploadResponse(
        rfp_id=outcome.rfp.id,
        status=outcome.rfp.status.value,
        message=message,
        warning=outcome.warning,
        processing=outcome.processing,
    )


@rfp_router.post("/{rfp_id}/process", response_model=ProcessingOutcome)
def process_rfp(rfp_id: str, pipeline=Depends(get_pipeline)):
    return pipeline.run(rfp_id)


@rfp_router.get("/{rfp_id}", response_model=RfpDetailResponse)
def get_rfp(rfp_id: str, repository=Depends(get_repository)):
    rfp = repository.get_rfp(rfp_id)
    if rfp is None:
        raise InputError(f"RFP not found: {rfp_id}", status_code=404)
    return RfpDetailResponse(rfp=rfp, requirements=repository.list_requirements(rfp_id))


# ── Proposal drafting ────────────────────────────────────

@rfp_router.post("/{rfp_id}/response", response_model=DraftResponse)
def generate_response(
    rfp_id: str,
    body: ResponseRequest,
    proposals=Depends(get_proposal_service),
):
    draft = proposals.generate_response(rfp_id, body.company_id)
    return DraftResponse(
        response_id=draft.id,
        section_title=draft.section_title,
        content=draft.draft_content,
    )


@rfp_router.post("/{rfp_id}/response-template", response_model=DraftResponse)
def generate_response_template(rfp_id: str, proposals=Depends(get_proposal_service)):
    draft = proposals.generate_template(rfp_id)
    return DraftResponse(
        response_id=draft.id,
        section_title=draft.section_title,
        content=draft.draft_content,
    )

"""
Persistence Agent — write the merged record back to storage.

Two sequential writes:
  1. RFP update (descriptive fields, audit blob, status → active) — fatal
  2. requirement insert — best effort, reported as requirements_persisted
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from rfp_analyzer.agents.base_agent import BaseAgent
from rfp_analyzer.errors import PersistenceError
from rfp_analyzer.models.enums import AgentName, RfpStatus
from rfp_analyzer.models.schemas import ExtractionResult
from rfp_analyzer.models.state import ExtractionState

logger = logging.getLogger(__name__)


class PersistenceAgent(BaseAgent):
    name = AgentName.PERSIST

    def __init__(self, repository):
        self.repository = repository

    def _real_process(self, state: ExtractionState) -> dict[str, Any]:
        report = state.merge_report
        if report is None:
            raise ValueError("Nothing to persist: reconcile produced no merge report")
        merged = report.result

        fields = build_rfp_update(merged)
        fields["extracted_data"] = build_audit_blob(state)
        fields["status"] = RfpStatus.ACTIVE.value
        self.repository.update_rfp(state.rfp_id, fields)

        persisted = True
        try:
            self.repository.insert_requirements(state.rfp_id, merged.requirements)
        except PersistenceError as exc:
            persisted = False
            logger.error(
                f"[PERSIST] Requirement insert failed for RFP {state.rfp_id}, "
                f"RFP update kept: {exc}"
            )

        return {
            "status": RfpStatus.ACTIVE,
            "requirements_count": len(merged.requirements),
            "requirements_persisted": persisted,
        }


def build_rfp_update(merged: ExtractionResult) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "client_name": merged.client_name,
        "deadline": merged.deadline,
        "budget_min": merged.budget_min,
        "budget_max": merged.budget_max,
        "currency": merged.currency,
        "description": merged.description,
        "required_technologies": list(merged.required_technologies),
    }
    if merged.title:
        fields["title"] = merged.title
    return fields


def build_audit_blob(state: ExtractionState) -> dict[str, Any]:
    report = state.merge_report

    def dump(result: ExtractionResult | None) -> dict[str, Any] | None:
        return result.model_dump(mode="json") if result is not None else None

    return {
        "remote": dump(state.remote_result),
        "pattern": dump(state.pattern_result),
        "merged": dump(report.result if report else None),
        "field_sources": {k: v.value for k, v in (report.field_sources if report else {}).items()},
        "merge_notes": list(report.notes) if report else [],
        "document_sha256": state.document_sha256,
        "decoder": state.decoder,
        "processed_at": datetime.now(timezone.utc).isoformat(),
    }

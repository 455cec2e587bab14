"""
LangGraph shared state for one processing invocation.

Design rules:
  1. Each field is "owned" by one node (see comments).
  2. Nodes may READ any field but only WRITE their owned fields;
     the two extraction nodes run in the same step, so a shared
     write would be rejected by the graph.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .enums import RfpStatus
from .schemas import ExtractionResult, MergeReport, RfpRecord


class ExtractionState(BaseModel):
    """The state passed through every node of the extraction graph."""

    # ── Trigger (set by the caller) ──────────────────────
    rfp_id: str = ""

    # ── load_document ────────────────────────────────────
    stored_rfp: Optional[RfpRecord] = None
    document_text: str = ""
    document_sha256: str = ""
    decoder: str = ""

    # ── pattern_extraction ───────────────────────────────
    pattern_result: Optional[ExtractionResult] = None

    # ── remote_extraction ────────────────────────────────
    remote_result: Optional[ExtractionResult] = None

    # ── reconcile ────────────────────────────────────────
    merge_report: Optional[MergeReport] = None

    # ── persist ──────────────────────────────────────────
    status: RfpStatus = RfpStatus.PENDING
    requirements_count: int = 0
    requirements_persisted: bool = False

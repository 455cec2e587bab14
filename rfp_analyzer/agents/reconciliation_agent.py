"""
Reconciliation Agent — fan-in point of the two extraction agents.
"""

from __future__ import annotations

from typing import Any

from rfp_analyzer.agents.base_agent import BaseAgent
from rfp_analyzer.models.enums import AgentName
from rfp_analyzer.models.schemas import ExtractionResult
from rfp_analyzer.models.state import ExtractionState
from rfp_analyzer.services.merger import merge


class ReconciliationAgent(BaseAgent):
    name = AgentName.RECONCILE

    def _real_process(self, state: ExtractionState) -> dict[str, Any]:
        report = merge(
            state.remote_result,
            state.pattern_result or ExtractionResult(),
            state.stored_rfp,
        )
        return {"merge_report": report}

"""
LangGraph State Machine — per-invocation RFP extraction pipeline.

    load_document
        ├─▶ pattern_extraction ─┐
        └─▶ remote_extraction ──┴─▶ reconcile ─▶ persist ─▶ END

The two extraction agents run in the same step and write disjoint state
fields; reconcile waits for both. Any agent error aborts the invocation
and propagates unchanged to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from langgraph.graph import END, StateGraph

from rfp_analyzer.agents import (
    IntakeAgent,
    PatternExtractionAgent,
    PersistenceAgent,
    ReconciliationAgent,
    RemoteExtractionAgent,
)
from rfp_analyzer.models.enums import AgentName
from rfp_analyzer.models.schemas import ExtractionResult, ProcessingOutcome
from rfp_analyzer.models.state import ExtractionState
from rfp_analyzer.services.pattern_extractor import PatternExtractor
from rfp_analyzer.services.remote_extractor import RemoteExtractionClient

logger = logging.getLogger(__name__)


class ExtractionPipeline:
    """
    Wires the agents to their collaborators and runs the compiled graph.

        pipeline = ExtractionPipeline(repository, FileService())
        outcome = pipeline.run(rfp_id)
    """

    def __init__(
        self,
        repository,
        files,
        remote_client: RemoteExtractionClient | None = None,
        extractor: PatternExtractor | None = None,
    ):
        self.intake = IntakeAgent(repository, files)
        self.pattern = PatternExtractionAgent(extractor)
        self.remote = RemoteExtractionAgent(remote_client)
        self.reconcile = ReconciliationAgent()
        self.persist = PersistenceAgent(repository)
        self.graph = self.build_graph()

    # ── Build the graph ──────────────────────────────────

    def build_graph(self):
        """Construct and compile the extraction graph."""
        graph = StateGraph(ExtractionState)

        graph.add_node(AgentName.LOAD_DOCUMENT.value, self.intake.process)
        graph.add_node(AgentName.PATTERN_EXTRACTION.value, self.pattern.process)
        graph.add_node(AgentName.REMOTE_EXTRACTION.value, self.remote.process)
        graph.add_node(AgentName.RECONCILE.value, self.reconcile.process)
        graph.add_node(AgentName.PERSIST.value, self.persist.process)

        graph.set_entry_point(AgentName.LOAD_DOCUMENT.value)

        # Fan-out
        graph.add_edge(AgentName.LOAD_DOCUMENT.value, AgentName.PATTERN_EXTRACTION.value)
        graph.add_edge(AgentName.LOAD_DOCUMENT.value, AgentName.REMOTE_EXTRACTION.value)

        # Fan-in: reconcile runs once both extractions have finished
        graph.add_edge(
            [AgentName.PATTERN_EXTRACTION.value, AgentName.REMOTE_EXTRACTION.value],
            AgentName.RECONCILE.value,
        )

        graph.add_edge(AgentName.RECONCILE.value, AgentName.PERSIST.value)
        graph.add_edge(AgentName.PERSIST.value, END)

        return graph.compile()

    # ── Convenience runner ───────────────────────────────

    def run(self, rfp_id: str) -> ProcessingOutcome:
        """Process one RFP end-to-end and report the outcome."""
        logger.info("═" * 60)
        logger.info(f"  RFP EXTRACTION STARTING — {rfp_id}")
        logger.info("═" * 60)

        final: Any = self.graph.invoke(ExtractionState(rfp_id=rfp_id))
        state = ExtractionState(**final) if isinstance(final, dict) else final

        report = state.merge_report
        outcome = ProcessingOutcome(
            rfp_id=rfp_id,
            status=state.status,
            extracted=report.result if report else ExtractionResult(),
            field_sources=report.field_sources if report else {},
            merge_notes=report.notes if report else [],
            requirements_count=state.requirements_count,
            requirements_persisted=state.requirements_persisted,
        )

        logger.info("═" * 60)
        logger.info(
            f"  EXTRACTION FINISHED — status: {outcome.status.value}, "
            f"requirements: {outcome.requirements_count} "
            f"(persisted={outcome.requirements_persisted})"
        )
        logger.info("═" * 60)
        return outcome

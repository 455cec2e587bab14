"""
Pattern Extraction Agent — regex extraction over the decoded text.
Pure computation; runs alongside the remote extraction agent.
"""

from __future__ import annotations

from typing import Any

from rfp_analyzer.agents.base_agent import BaseAgent
from rfp_analyzer.models.enums import AgentName
from rfp_analyzer.models.state import ExtractionState
from rfp_analyzer.services.pattern_extractor import PatternExtractor


class PatternExtractionAgent(BaseAgent):
    name = AgentName.PATTERN_EXTRACTION

    def __init__(self, extractor: PatternExtractor | None = None):
        self.extractor = extractor or PatternExtractor()

    def _real_process(self, state: ExtractionState) -> dict[str, Any]:
        return {"pattern_result": self.extractor.extract(state.document_text)}

"""
Intake Agent — load_document

Responsibility:
  Resolve the RFP by id, fetch its document blob, decode the bytes to text
  and hash them.

Does NOT: extract fields, call the LLM, or write anything.
"""

from __future__ import annotations

import logging
from typing import Any

from rfp_analyzer.agents.base_agent import BaseAgent
from rfp_analyzer.errors import InputError
from rfp_analyzer.models.enums import AgentName
from rfp_analyzer.models.state import ExtractionState
from rfp_analyzer.services.parsing_service import ParsingService

logger = logging.getLogger(__name__)


class IntakeAgent(BaseAgent):
    name = AgentName.LOAD_DOCUMENT

    def __init__(self, repository, files):
        self.repository = repository
        self.files = files

    def _real_process(self, state: ExtractionState) -> dict[str, Any]:
        if not state.rfp_id:
            raise InputError("RFP ID is required")

        rfp = self.repository.get_rfp(state.rfp_id)
        if rfp is None:
            raise InputError(f"RFP not found: {state.rfp_id}", status_code=404)
        if not rfp.document_url:
            raise InputError(f"RFP {state.rfp_id} has no document attached")

        logger.info(f"[INTAKE] Downloading {rfp.document_url}")
        data = self.files.load_file(rfp.document_url)
        document = ParsingService.decode_document(data)

        logger.info(
            f"[INTAKE] RFP {rfp.id} ({rfp.title!r}) — {len(document.text):,} chars, "
            f"sha256={document.sha256[:16]}…"
        )
        return {
            "stored_rfp": rfp,
            "document_text": document.text,
            "document_sha256": document.sha256,
            "decoder": document.decoder,
        }

"""
Remote Extraction Agent — structured extraction through the LLM.

Every RemoteReply variant is handled here: a structured payload is used
as-is, free text must parse as the extraction JSON, and any failure
stops the invocation with the matching error. The pattern result is
never substituted for a failed remote call.
"""

from __future__ import annotations

import logging
from typing import Any

from rfp_analyzer.agents.base_agent import BaseAgent
from rfp_analyzer.models.enums import AgentName
from rfp_analyzer.models.state import ExtractionState
from rfp_analyzer.services.remote_extractor import RemoteExtractionClient, resolve_remote_reply

logger = logging.getLogger(__name__)


class RemoteExtractionAgent(BaseAgent):
    name = AgentName.REMOTE_EXTRACTION

    def __init__(self, client: RemoteExtractionClient | None = None):
        self._client = client

    @property
    def client(self) -> RemoteExtractionClient:
        if self._client is None:
            self._client = RemoteExtractionClient()
        return self._client

    def _real_process(self, state: ExtractionState) -> dict[str, Any]:
        reply = self.client.extract(state.document_text)
        logger.info(f"[REMOTE] Reply kind: {reply.kind}")
        return {"remote_result": resolve_remote_reply(reply)}

"""
Base agent class that every extraction-graph node inherits.

Design:
  - `process()` is called by the LangGraph node.
  - `_real_process()` is the single abstract method — override in each agent.
    It returns only the state fields the agent owns, so the two
    extraction agents can run in the same graph step.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from rfp_analyzer.models.enums import AgentName
from rfp_analyzer.models.state import ExtractionState

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Abstract base for all graph agents."""

    name: AgentName  # set in each subclass

    # ── Public entry point (called by LangGraph node) ────

    def process(self, state: ExtractionState | dict[str, Any]) -> dict[str, Any]:
        """
        LangGraph calls this as the node function.
        Returns a partial update that LangGraph merges into the shared state.
        """
        t0 = time.perf_counter()
        separator = "═" * 70
        logger.info(separator)
        logger.info(f"▶ [{self.name.value}] STARTING")

        # Hydrate state from dict
        if isinstance(state, dict):
            state = ExtractionState(**state)

        try:
            updates = self._real_process(state)
        except Exception as exc:
            elapsed = time.perf_counter() - t0
            logger.exception(f"✘ [{self.name.value}] FAILED after {elapsed:.3f}s: {exc}")
            logger.info(separator)
            raise

        elapsed = time.perf_counter() - t0
        logger.info(f"✔ [{self.name.value}] COMPLETED in {elapsed:.3f}s")
        _log_updates("STATE CHANGES", updates)
        logger.info(separator)
        return updates

    # ── Subclass hook ────────────────────────────────────

    @abstractmethod
    def _real_process(self, state: ExtractionState) -> dict[str, Any]:
        """Do the work and return the owned fields that changed."""
        ...


# ── Debug helpers (module-level) ─────────────────────────

def _log_updates(label: str, updates: dict[str, Any]) -> None:
    """Log which keys a node wrote, with short values."""
    if not updates:
        logger.debug(f"  ── {label}: no changes")
        return
    lines = [f"  ┌─ {label}"]
    for key in sorted(updates):
        lines.append(f"  │  {key}: {_truncate(updates[key])}")
    lines.append(f"  └─ ({len(updates)} fields changed)")
    logger.debug("\n".join(lines))


def _truncate(val: Any, max_len: int = 120) -> str:
    """Produce a short repr for debug logging."""
    if val is None:
        return "<None>"
    if isinstance(val, BaseModel):
        val = val.model_dump(mode="json")
    if isinstance(val, str):
        if len(val) > max_len:
            return repr(val[:max_len]) + f"…({len(val)} chars)"
        return repr(val)
    if isinstance(val, list):
        return f"list({len(val)} items)"
    if isinstance(val, dict):
        try:
            s = json.dumps(val, default=str)
        except (TypeError, ValueError):
            return f"dict({len(val)} keys)"
        if len(s) > max_len:
            return s[:max_len] + f"…({len(s)} chars)"
        return s
    s = str(val)
    if len(s) > max_len:
        return s[:max_len] + "…"
    return s

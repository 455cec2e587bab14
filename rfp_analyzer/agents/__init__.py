from .base_agent import BaseAgent
from .intake_agent import IntakeAgent
from .pattern_extraction_agent import PatternExtractionAgent
from .remote_extraction_agent import RemoteExtractionAgent
from .reconciliation_agent import ReconciliationAgent
from .persistence_agent import PersistenceAgent

__all__ = [
    "BaseAgent",
    "IntakeAgent",
    "PatternExtractionAgent",
    "RemoteExtractionAgent",
    "ReconciliationAgent",
    "PersistenceAgent",
]

"""Services — FileService, ParsingService, PatternExtractor, RemoteExtractionClient, ProposalService, IntakeService."""

from rfp_analyzer.services.file_service import FileService
from rfp_analyzer.services.parsing_service import ParsingService
from rfp_analyzer.services.pattern_extractor import PatternExtractor
from rfp_analyzer.services.remote_extractor import RemoteExtractionClient
from rfp_analyzer.services.proposal_service import ProposalService
from rfp_analyzer.services.intake_service import IntakeService

__all__ = [
    "FileService",
    "ParsingService",
    "PatternExtractor",
    "RemoteExtractionClient",
    "ProposalService",
    "IntakeService",
]

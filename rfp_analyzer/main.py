"""
RFP Analyzer — Main Entry Point

Run as an API server:
    python -m rfp_analyzer --serve
    # or: uvicorn rfp_analyzer.api:app --reload --port 8000

Or process a stored RFP programmatically:
    from rfp_analyzer.main import run
    outcome = run("<rfp id>")
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from rfp_analyzer.config import get_settings
from rfp_analyzer.models.schemas import ProcessingOutcome
from rfp_analyzer.utils.logger import setup_logging


def run(rfp_id: str) -> ProcessingOutcome:
    """Run extraction for one stored RFP and return the outcome."""
    from rfp_analyzer.orchestration.graph import ExtractionPipeline
    from rfp_analyzer.persistence import RfpRepository
    from rfp_analyzer.services.file_service import FileService

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("  RFP ANALYZER")
    logger.info(f"  Started: {datetime.now(timezone.utc).isoformat()}")
    logger.info("=" * 60)

    outcome = ExtractionPipeline(RfpRepository(), FileService()).run(rfp_id)
    _print_summary(outcome)
    return outcome


def _print_summary(outcome: ProcessingOutcome) -> None:
    """Log a human-readable summary of the processing result."""
    logger = logging.getLogger(__name__)
    extracted = outcome.extracted

    logger.info("")
    logger.info("-" * 60)
    logger.info("  EXTRACTION RESULT SUMMARY")
    logger.info("-" * 60)
    logger.info(f"  RFP ID:         {outcome.rfp_id}")
    logger.info(f"  Status:         {outcome.status.value}")
    logger.info(f"  Client:         {extracted.client_name or 'N/A'}")
    logger.info(f"  Deadline:       {extracted.deadline or 'N/A'}")
    logger.info(
        f"  Budget:         {extracted.budget_min or '-'} – {extracted.budget_max or '-'} "
        f"{extracted.currency}"
    )
    logger.info(
        f"  Requirements:   {outcome.requirements_count} "
        f"({'stored' if outcome.requirements_persisted else 'NOT stored'})"
    )
    for note in outcome.merge_notes:
        logger.info(f"  Note:           {note}")
    logger.info("-" * 60)


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting {settings.app_name} API on {host}:{port}")
    uvicorn.run("rfp_analyzer.api:app", host=host, port=port, reload=settings.debug)


def cli() -> None:
    if "--serve" in sys.argv:
        serve()
    elif len(sys.argv) > 1:
        run(sys.argv[1])
    else:
        print("usage: python -m rfp_analyzer --serve | <rfp_id>")


if __name__ == "__main__":
    cli()

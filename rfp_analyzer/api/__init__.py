"""
FastAPI application factory and API package.

Run with:
    uvicorn rfp_analyzer.api:app --reload --port 8000

Or via main.py:
    python -m rfp_analyzer --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rfp_analyzer.api.company_routes import company_router
from rfp_analyzer.api.routes import health_router, rfp_router
from rfp_analyzer.config import get_settings
from rfp_analyzer.errors import RfpProcessingError

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="RFP Analyzer API",
        description="Requirement extraction and proposal drafting for RFP documents",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
    )

    # CORS: allow the frontend (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(rfp_router)
    application.include_router(company_router)

    @application.exception_handler(RfpProcessingError)
    async def processing_error_handler(request: Request, exc: RfpProcessingError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "retryable": exc.retryable},
        )

    return application


# Module-level instance for `uvicorn rfp_analyzer.api:app`
app = create_app()

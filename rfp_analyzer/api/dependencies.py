"""
FastAPI dependency providers.

Collaborators are built once per process; tests replace them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from rfp_analyzer.orchestration.graph import ExtractionPipeline
from rfp_analyzer.persistence import RfpRepository
from rfp_analyzer.services.file_service import FileService
from rfp_analyzer.services.intake_service import IntakeService
from rfp_analyzer.services.proposal_service import ProposalService
from rfp_analyzer.services.remote_extractor import RemoteExtractionClient


@lru_cache()
def get_repository() -> RfpRepository:
    return RfpRepository()


@lru_cache()
def get_file_service() -> FileService:
    return FileService()


@lru_cache()
def get_remote_client() -> RemoteExtractionClient:
    return RemoteExtractionClient()


def get_pipeline(
    repository=Depends(get_repository),
    files=Depends(get_file_service),
    remote_client=Depends(get_remote_client),
) -> ExtractionPipeline:
    return ExtractionPipeline(repository, files, remote_client=remote_client)


def get_intake_service(
    repository=Depends(get_repository),
    files=Depends(get_file_service),
    pipeline: ExtractionPipeline = Depends(get_pipeline),
) -> IntakeService:
    return IntakeService(repository, files, pipeline)


def get_proposal_service(repository=Depends(get_repository)) -> ProposalService:
    return ProposalService(repository)

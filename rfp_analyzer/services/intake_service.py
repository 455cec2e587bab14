"""
Intake Service — accepts an uploaded RFP document.

upload():
  1. validate PDF type and size
  2. create the RFP (status "pending")
  3. store the blob under rfp-documents/<rfp_id>/<filename>
  4. record document_url
  5. run the extraction pipeline

A processing failure does not fail the upload: the RFP stays "pending"
and the error is returned as a warning.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rfp_analyzer.config import get_settings
from rfp_analyzer.errors import InputError, RfpProcessingError
from rfp_analyzer.models.schemas import UploadOutcome, RfpRecord

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


class IntakeService:
    def __init__(self, repository, files, pipeline, max_upload_bytes: int | None = None):
        self.repository = repository
        self.files = files
        self.pipeline = pipeline
        self.max_upload_bytes = max_upload_bytes or get_settings().max_upload_bytes

    def upload(
        self,
        title: str,
        filename: str,
        data: bytes,
        content_type: str | None = None,
    ) -> UploadOutcome:
        self.validate_upload(filename, data, content_type)

        record = self.repository.create_rfp(RfpRecord(title=title.strip() or "Untitled RFP"))
        key = self.files.save_file(data, self.files.document_key(record.id, filename))
        self.repository.set_document_url(record.id, key)
        record.document_url = key
        logger.info(f"Received upload: {filename} → {record.id}")

        try:
            outcome = self.pipeline.run(record.id)
        except RfpProcessingError as exc:
            logger.warning(f"Processing failed for {record.id}, RFP left pending: {exc.message}")
            return UploadOutcome(
                rfp=record,
                warning=f"RFP uploaded but processing failed: {exc.message}",
            )

        stored = self.repository.get_rfp(record.id) or record
        return UploadOutcome(rfp=stored, processing=outcome)

    def validate_upload(self, filename: str, data: bytes, content_type: str | None) -> None:
        is_pdf_name = Path(filename or "").suffix.lower() == ".pdf"
        if content_type not in PDF_CONTENT_TYPES and not is_pdf_name:
            raise InputError("Please upload a PDF file")
        if not data:
            raise InputError("Uploaded file is empty")
        if len(data) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes / (1024 * 1024)
            raise InputError(f"File size must be less than {limit_mb:.0f}MB")

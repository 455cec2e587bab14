"""
File Service — blob store for uploaded RFP documents.
Documents live under a local root, addressed by a relative key such as
``rfp-documents/<rfp_id>/<filename>``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rfp_analyzer.config import get_settings
from rfp_analyzer.errors import InputError, TransportFailure

logger = logging.getLogger(__name__)

DOCUMENT_BUCKET = "rfp-documents"


class FileService:
    """Local-disk blob store."""

    def __init__(self, base_path: str | None = None):
        settings = get_settings()
        self.base_path = Path(base_path or settings.local_storage_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def document_key(rfp_id: str, filename: str) -> str:
        safe_name = Path(filename).name or "document.pdf"
        return f"{DOCUMENT_BUCKET}/{rfp_id}/{safe_name}"

    def save_file(self, file_bytes: bytes, key: str) -> str:
        """Save a blob and return its key."""
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(file_bytes)
        except OSError as exc:
            raise TransportFailure(f"Failed to store document {key}: {exc}") from exc
        logger.info(f"Saved {len(file_bytes):,} bytes to {key}")
        return key

    def load_file(self, key: str) -> bytes:
        """Load a blob's content."""
        path = self._resolve(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            raise TransportFailure(f"Document not found in storage: {key}") from exc
        except OSError as exc:
            raise TransportFailure(f"Failed to download document {key}: {exc}") from exc
        logger.info(f"Loaded {len(data):,} bytes from {key}")
        return data

    def _resolve(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if not path.is_relative_to(self.base_path):
            raise InputError(f"Invalid document key: {key}")
        return path

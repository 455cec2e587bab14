"""
Parsing Service — best-effort text decoding of uploaded RFP documents.

Decoding order:
  1. PyMuPDF page text (real PDFs)
  2. Naive UTF-8 decode of the raw bytes, undecodable bytes dropped
     (plain-text uploads, broken or truncated PDFs)

Does NOT:
  • Summarize, interpret, or extract fields
  • Call any LLM
"""

from __future__ import annotations

import logging
import re

from rfp_analyzer.errors import InputError
from rfp_analyzer.models.schemas import RawDocument
from rfp_analyzer.utils.hashing import sha256_hash

logger = logging.getLogger(__name__)

_PDF_MAGIC = b"%PDF"
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class ParsingService:
    """
    Turn uploaded bytes into a RawDocument.

        doc = ParsingService.decode_document(data)
    """

    @staticmethod
    def decode_document(data: bytes) -> RawDocument:
        if not data:
            raise InputError("Document is empty")

        text = ""
        decoder = "naive"
        if data.startswith(_PDF_MAGIC):
            try:
                text = ParsingService.extract_pdf_text(data)
                decoder = "pymupdf"
            except Exception as exc:
                logger.warning(f"[PARSE] PyMuPDF could not read document, decoding naively: {exc}")

        if not text.strip():
            text = ParsingService.naive_decode(data)
            decoder = "naive"

        if not text.strip():
            raise InputError("No text could be decoded from the document")

        document = RawDocument(
            content=data,
            text=text,
            sha256=sha256_hash(data),
            decoder=decoder,
        )
        logger.info(
            f"[PARSE] Decoded {len(data):,} bytes → {len(text):,} chars "
            f"via {decoder} (sha256={document.sha256[:12]}…)"
        )
        return document

    @staticmethod
    def extract_pdf_text(data: bytes) -> str:
        """Concatenate the plain text of every page using PyMuPDF."""
        import fitz  # PyMuPDF

        with fitz.open(stream=data, filetype="pdf") as doc:
            pages = [page.get_text("text") for page in doc]
        logger.debug(f"[PARSE] PyMuPDF read {len(pages)} pages")
        return "\n".join(pages)

    @staticmethod
    def naive_decode(data: bytes) -> str:
        text = data.decode("utf-8", errors="ignore")
        return _CONTROL_CHARS_RE.sub(" ", text)

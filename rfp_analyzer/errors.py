"""
Error taxonomy for RFP processing.

Every error carries the HTTP status the API layer answers with and
whether the caller may retry the same request unchanged.
"""

from __future__ import annotations


class RfpProcessingError(Exception):
    """Base class for every failure surfaced to a caller."""

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InputError(RfpProcessingError):
    """Missing RFP id, unknown RFP, missing document, rejected upload."""

    status_code = 400


class TransportFailure(RfpProcessingError):
    """The document blob could not be fetched."""

    status_code = 502


class RemoteThrottled(RfpProcessingError):
    """The model provider is rate-limiting us (HTTP 429)."""

    status_code = 429
    retryable = True


class RemoteQuotaExhausted(RfpProcessingError):
    """The model provider wants payment (HTTP 402)."""

    status_code = 402


class RemoteMalformed(RfpProcessingError):
    """The model answered, but not with a usable extraction payload."""

    status_code = 502


class RemoteFailure(RfpProcessingError):
    """Any other model failure."""

    status_code = 502


class PersistenceError(RfpProcessingError):
    status_code = 500


class ConfigurationError(RfpProcessingError):
    """A required credential is not configured."""

    status_code = 500

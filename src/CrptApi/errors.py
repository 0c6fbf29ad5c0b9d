"""Exception hierarchy shared by the limiter, the submission client, and the CLI.

Submitting a document touches configuration, JSON encoding, and an HTTPS
round-trip. The failure modes are grouped so caller code can react to the
broad categories (any I/O failure vs. a cancelled wait) while still having
access to the specific subclass when finer-grained handling is required.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "CrptApiError",
    "ConfigurationError",
    "SubmissionError",
    "DocumentSerializationError",
    "TransportFailure",
    "SubmissionCancelled",
]


class CrptApiError(RuntimeError):
    """Base exception for every failure raised by the CrptApi package."""


class ConfigurationError(CrptApiError):
    """Raised when limiter or client configuration inputs are invalid."""


class SubmissionError(CrptApiError):
    """I/O failure while turning a document into a completed POST."""


class DocumentSerializationError(SubmissionError):
    """Raised when a document cannot be validated or encoded to JSON."""


class TransportFailure(SubmissionError):
    """Raised when the HTTPS POST could not be completed."""

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class SubmissionCancelled(CrptApiError):
    """Raised when the caller cancelled while waiting for a rate limit permit."""

"""Rate-limited client for the traceability service's document API.

Exports the submission client, the document models, and the limiters so
callers can write::

    from CrptApi import CrptApi, Document, TimeUnit
"""

from CrptApi.cancellation import CancellationToken, CancellationTokenGroup
from CrptApi.client import CrptApi, wait_for_permit
from CrptApi.documents import Description, Document, Product, serialize_document
from CrptApi.errors import (
    ConfigurationError,
    CrptApiError,
    DocumentSerializationError,
    SubmissionCancelled,
    SubmissionError,
    TransportFailure,
)
from CrptApi.ratelimit import (
    FixedWindowRateLimiter,
    RateLimiter,
    SlidingWindowRateLimiter,
    TimeUnit,
    WindowSnapshot,
    build_rate_limiter,
)
from CrptApi.settings import DOCUMENT_CREATE_URL, CrptSettings
from CrptApi.version import __version__

__all__ = [
    "CancellationToken",
    "CancellationTokenGroup",
    "ConfigurationError",
    "CrptApi",
    "CrptApiError",
    "CrptSettings",
    "DOCUMENT_CREATE_URL",
    "Description",
    "Document",
    "DocumentSerializationError",
    "FixedWindowRateLimiter",
    "Product",
    "RateLimiter",
    "SlidingWindowRateLimiter",
    "SubmissionCancelled",
    "SubmissionError",
    "TimeUnit",
    "TransportFailure",
    "WindowSnapshot",
    "__version__",
    "build_rate_limiter",
    "serialize_document",
    "wait_for_permit",
]

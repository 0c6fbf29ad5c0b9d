# === NAVMAP v1 ===
# {
#   "module": "CrptApi.client",
#   "purpose": "Rate-limited client for the documents/create endpoint",
#   "sections": [
#     {"id": "wait-for-permit", "name": "wait_for_permit", "anchor": "function-wait-for-permit", "kind": "function"},
#     {"id": "crptapi", "name": "CrptApi", "anchor": "class-crptapi", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Rate-limited submission client for the traceability service.

Each :meth:`CrptApi.create_document` call blocks until the limiter grants a
permit, encodes the document, and issues exactly one HTTPS POST. The response
body is read but not interpreted; HTTP error statuses are returned to the
caller like any other response. Nothing is retried.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Union

import httpx

from CrptApi.cancellation import CancellationToken, CancellationTokenGroup
from CrptApi.documents import Document, serialize_document
from CrptApi.errors import ConfigurationError, SubmissionCancelled, TransportFailure
from CrptApi.http import build_http_client
from CrptApi.ratelimit import RateLimiter, TimeUnit, build_rate_limiter
from CrptApi.settings import CrptSettings

LOGGER = logging.getLogger(__name__)

DocumentLike = Union[Document, Mapping[str, Any]]


def wait_for_permit(
    limiter: RateLimiter,
    *,
    poll_interval_s: float = 0.01,
    cancel_token: Optional[CancellationToken] = None,
) -> int:
    """Block until ``limiter`` admits the caller.

    The wait is unbounded. With a ``cancel_token`` the sleep between attempts
    wakes as soon as cancellation is requested, and no permit is taken once the
    token is cancelled.

    Returns:
        Number of rejected attempts before the permit was granted.

    Raises:
        SubmissionCancelled: If ``cancel_token`` is cancelled while waiting.
    """

    waits = 0
    while True:
        if cancel_token is not None and cancel_token.is_cancelled():
            LOGGER.info("Admission wait cancelled after %d attempts", waits)
            raise SubmissionCancelled("Cancelled while waiting for a rate limit permit")
        if limiter.try_acquire():
            if waits:
                LOGGER.debug("Permit granted after %d waits", waits)
            return waits
        waits += 1
        if cancel_token is None:
            time.sleep(poll_interval_s)
        else:
            cancel_token.wait(poll_interval_s)


def _check_request_limit(request_limit: int) -> int:
    if isinstance(request_limit, bool) or not isinstance(request_limit, int):
        raise ConfigurationError(
            f"request_limit must be a positive integer, got {request_limit!r}"
        )
    if request_limit < 1:
        raise ConfigurationError(f"request_limit must be >= 1, got {request_limit}")
    return request_limit


class CrptApi:
    """Client for creating documents, capped at ``request_limit`` calls per window.

    Args:
        time_unit: Window size unit (``TimeUnit`` or a name such as ``"seconds"``).
        request_limit: Maximum submissions admitted per window; must be >= 1.
        settings: Client settings; defaults are read from ``CRPT_*`` variables.
        http_client: Pre-built client to use instead of an owned one.
        transport: Transport for the owned client (e.g. ``httpx.MockTransport``).
        rate_limiter: Limiter to use instead of one built from the arguments.

    Examples:
        >>> with CrptApi(TimeUnit.SECONDS, 10) as api:  # doctest: +SKIP
        ...     api.create_document(Document(doc_id="42"), "signature123")
    """

    def __init__(
        self,
        time_unit: Union[str, TimeUnit],
        request_limit: int,
        *,
        settings: Optional[CrptSettings] = None,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.settings = settings or CrptSettings()
        self.time_unit = TimeUnit.parse(time_unit)
        self.request_limit = _check_request_limit(request_limit)
        self.rate_limiter = rate_limiter or build_rate_limiter(
            self.settings.rate_limit_strategy,
            request_limit,
            self.time_unit,
            window_units=self.settings.window_units,
        )
        self._owns_client = http_client is None
        self._http = http_client or build_http_client(self.settings, transport=transport)

    def create_document(
        self,
        document: DocumentLike,
        signature: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> httpx.Response:
        """Submit ``document`` signed with ``signature``.

        Blocks until a permit is available, then POSTs the JSON body once.

        Returns:
            The HTTP response, with its body already read.

        Raises:
            ValueError: If ``signature`` is empty.
            SubmissionCancelled: If ``cancel_token`` fires during the admission wait.
            DocumentSerializationError: If the document cannot be encoded.
            TransportFailure: If the POST could not be completed.
        """

        if not isinstance(signature, str) or not signature:
            raise ValueError("signature must be a non-empty string")

        wait_for_permit(
            self.rate_limiter,
            poll_interval_s=self.settings.poll_interval_s,
            cancel_token=cancel_token,
        )
        body = serialize_document(document)

        url = self.settings.url
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Signature": signature,
        }
        try:
            response = self._http.post(url, content=body.encode("utf-8"), headers=headers)
            response.read()
        except httpx.HTTPError as exc:
            LOGGER.warning("Document submission to %s failed: %s", url, exc)
            raise TransportFailure(f"POST {url} failed: {exc}", url=url) from exc

        LOGGER.debug(
            "document-submitted",
            extra={
                "extra_fields": {
                    "status": response.status_code,
                    "body": response.text,
                }
            },
        )
        return response

    def submit_many(
        self,
        items: Iterable[tuple[DocumentLike, str]],
        *,
        max_workers: int = 1,
        cancel_group: Optional[CancellationTokenGroup] = None,
    ) -> list[httpx.Response]:
        """Submit ``(document, signature)`` pairs concurrently, preserving order.

        Every submission is admitted through the same limiter. Cancelling
        ``cancel_group`` aborts submissions still waiting for a permit; the first
        failure is raised once all tasks have settled.
        """

        group = cancel_group if cancel_group is not None else CancellationTokenGroup()

        def _submit(pair: tuple[DocumentLike, str]) -> httpx.Response:
            token = group.create_token()
            try:
                return self.create_document(pair[0], pair[1], cancel_token=token)
            finally:
                group.remove_token(token)

        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
            futures = [pool.submit(_submit, pair) for pair in items]
        return [future.result() for future in futures]

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "CrptApi":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["CrptApi", "wait_for_permit"]

"""HTTPX client factory for the CrptApi submission client.

Responsibilities
----------------
- Build an :class:`httpx.Client` from :class:`CrptSettings` with explicit
  timeout budgets, connection pool limits, and a certifi-backed SSL context.
- Allow callers to inject a transport (e.g. :class:`httpx.MockTransport`) so
  tests never leave the process.
- Attach event hooks that time each request and log request/response pairs.
- Fall back to HTTP/1.1 when HTTP/2 is requested but ``h2`` is not installed.
"""

from __future__ import annotations

import logging
import ssl
import time
from typing import Optional

import certifi
import httpx

from CrptApi.settings import CrptSettings

LOGGER = logging.getLogger(__name__)


def _build_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.load_verify_locations(certifi.where())
    return context


def _on_request(request: httpx.Request) -> None:
    """Hook: capture request start time."""
    request.extensions["t0_perf"] = time.perf_counter()
    LOGGER.debug(
        "httpx-request",
        extra={"extra_fields": {"method": request.method, "url": str(request.url)}},
    )


def _on_response(response: httpx.Response) -> None:
    """Hook: log status and elapsed time for the completed request."""
    req = response.request
    t0 = req.extensions.get("t0_perf", time.perf_counter())
    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    LOGGER.debug(
        "httpx-response",
        extra={
            "extra_fields": {
                "method": req.method,
                "url": str(req.url),
                "status": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "http_version": response.http_version,
            }
        },
    )


def build_http_client(
    settings: CrptSettings,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Return a new :class:`httpx.Client` configured from ``settings``."""

    timeout = httpx.Timeout(
        settings.timeout_connect_s,
        read=settings.timeout_read_s,
        write=settings.timeout_write_s,
        pool=settings.timeout_pool_s,
    )
    limits = httpx.Limits(
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_keepalive_connections,
    )

    if transport is None:
        transport = _build_transport(settings, limits)

    return httpx.Client(
        transport=transport,
        timeout=timeout,
        headers={"User-Agent": settings.user_agent},
        event_hooks={"request": [_on_request], "response": [_on_response]},
        follow_redirects=False,
    )


def _build_transport(settings: CrptSettings, limits: httpx.Limits) -> httpx.BaseTransport:
    """Build the network transport; no transport-level retries."""
    verify = _build_ssl_context() if settings.verify_tls else False
    if settings.http2:
        try:
            return httpx.HTTPTransport(http2=True, verify=verify, limits=limits, retries=0)
        except ImportError:
            LOGGER.warning(
                "HTTP/2 support unavailable (missing 'h2' package); falling back to HTTP/1.1 transport."
            )
    return httpx.HTTPTransport(http2=False, verify=verify, limits=limits, retries=0)


__all__ = ["build_http_client"]

"""Shared fixtures for CrptApi tests."""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable

import httpx
import pytest

from CrptApi.settings import CrptSettings
from tests.helpers.clocks import FakeClock


class RecordingHandler:
    """MockTransport handler that records every request it serves."""

    def __init__(self, status: int = 200, body: bytes = b'{"value":"ok"}') -> None:
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self.requests.append(request)
        return httpx.Response(
            self.status,
            headers={"Content-Type": "application/json"},
            content=self.body,
            request=request,
        )


@pytest.fixture(autouse=True)
def _isolate_crpt_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.upper().startswith("CRPT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def mock_transport(recording_handler: RecordingHandler) -> httpx.MockTransport:
    return httpx.MockTransport(recording_handler)


@pytest.fixture
def settings() -> CrptSettings:
    return CrptSettings(poll_interval_s=0.005)


@pytest.fixture
def make_handler() -> Callable[..., RecordingHandler]:
    return RecordingHandler


@pytest.fixture(autouse=True)
def _restore_crpt_logger():
    logger = logging.getLogger("CrptApi")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate

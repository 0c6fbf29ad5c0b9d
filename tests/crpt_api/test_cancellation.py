"""Cooperative cancellation token behaviour."""

from __future__ import annotations

import threading
import time

from CrptApi.cancellation import CancellationToken, CancellationTokenGroup


def test_token_wait_returns_early_on_cancel() -> None:
    token = CancellationToken()
    threading.Timer(0.02, token.cancel).start()

    t0 = time.monotonic()
    assert token.wait(5.0) is True
    assert time.monotonic() - t0 < 1.0


def test_token_wait_times_out_when_not_cancelled() -> None:
    token = CancellationToken()
    assert token.wait(0.01) is False
    assert not token.is_cancelled()


def test_token_reset() -> None:
    token = CancellationToken()
    token.cancel()
    token.reset()
    assert not token.is_cancelled()


def test_group_cancels_existing_and_future_tokens() -> None:
    group = CancellationTokenGroup()
    first = group.create_token()
    group.cancel_all()
    late = group.create_token()

    assert first.is_cancelled()
    assert late.is_cancelled()
    assert group.is_cancelled()


def test_group_remove_token_is_idempotent() -> None:
    group = CancellationTokenGroup()
    token = group.create_token()
    group.remove_token(token)
    group.remove_token(token)
    assert len(group) == 0

"""Cooperative cancellation primitives for callers blocked on the rate limiter.

Python threads cannot be interrupted from the outside, so a submission that is
waiting for a permit checks a :class:`CancellationToken` between attempts.
The token wraps a :class:`threading.Event`, which lets the admission wait
sleep on the event itself and wake up as soon as cancellation is requested
instead of finishing the current poll interval. :class:`CancellationTokenGroup`
broadcasts cancellation across related submissions (for example, every
document in a batch).
"""

from __future__ import annotations

import threading


class CancellationToken:
    """Thread-safe cancellation token for cooperative task cancellation.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel()
        >>> token.wait(0.01)
        True
    """

    def __init__(self) -> None:
        self._is_cancelled = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        with self._lock:
            self._is_cancelled.set()

    def is_cancelled(self) -> bool:
        """Return ``True`` once cancellation has been requested."""
        return self._is_cancelled.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, returning early if cancelled.

        Returns:
            True if cancellation was requested before or during the wait.
        """
        return self._is_cancelled.wait(timeout)

    def reset(self) -> None:
        """Reset the token to its initial state (tests and controlled reuse only)."""
        with self._lock:
            self._is_cancelled.clear()


class CancellationTokenGroup:
    """A group of cancellation tokens that can be cancelled together."""

    def __init__(self) -> None:
        self._tokens: list[CancellationToken] = []
        self._lock = threading.Lock()
        self._cancelled = False

    def add_token(self, token: CancellationToken) -> None:
        """Add ``token`` to this group, cancelling it if the group already is."""
        with self._lock:
            self._tokens.append(token)
            if self._cancelled:
                token.cancel()

    def create_token(self) -> CancellationToken:
        """Create a new token that belongs to this group."""
        token = CancellationToken()
        self.add_token(token)
        return token

    def remove_token(self, token: CancellationToken) -> None:
        """Drop ``token`` from the group once its submission has finished."""
        with self._lock:
            if token in self._tokens:
                self._tokens.remove(token)

    def cancel_all(self) -> None:
        """Cancel every token in this group, including ones added later."""
        with self._lock:
            self._cancelled = True
            for token in self._tokens:
                token.cancel()

    def is_cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

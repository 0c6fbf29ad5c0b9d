# === NAVMAP v1 ===
# {
#   "module": "CrptApi.ratelimit",
#   "purpose": "Thread-safe admission control capping submissions per time window.",
#   "sections": [
#     {"id": "timeunit", "name": "TimeUnit", "anchor": "class-timeunit", "kind": "class"},
#     {"id": "ratelimiter", "name": "RateLimiter", "anchor": "class-ratelimiter", "kind": "class"},
#     {"id": "windowsnapshot", "name": "WindowSnapshot", "anchor": "class-windowsnapshot", "kind": "class"},
#     {"id": "fixedwindowratelimiter", "name": "FixedWindowRateLimiter", "anchor": "class-fixedwindowratelimiter", "kind": "class"},
#     {"id": "slidingwindowratelimiter", "name": "SlidingWindowRateLimiter", "anchor": "class-slidingwindowratelimiter", "kind": "class"},
#     {"id": "build-rate-limiter", "name": "build_rate_limiter", "anchor": "function-build-rate-limiter", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Admission control for document submissions.

Provides:
- A fixed-window limiter that admits at most ``threshold`` callers per window
  and rolls the window at most once per boundary
- A rolling-window alternative backed by pyrate-limiter
- ``TimeUnit`` for expressing window sizes the way callers think about them

Both limiters expose a single non-blocking ``try_acquire()``; waiting for a
permit is the caller's concern (see :func:`CrptApi.client.wait_for_permit`).
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Protocol, Union

from pyrate_limiter import Limiter, Rate

from CrptApi.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

Strategy = Literal["fixed", "sliding"]

_UNIT_ALIASES = {
    "ms": "MILLISECONDS",
    "millisecond": "MILLISECONDS",
    "milliseconds": "MILLISECONDS",
    "s": "SECONDS",
    "sec": "SECONDS",
    "second": "SECONDS",
    "seconds": "SECONDS",
    "m": "MINUTES",
    "min": "MINUTES",
    "minute": "MINUTES",
    "minutes": "MINUTES",
    "h": "HOURS",
    "hour": "HOURS",
    "hours": "HOURS",
    "d": "DAYS",
    "day": "DAYS",
    "days": "DAYS",
}


class TimeUnit(str, Enum):
    """Time granularity used to size a rate limit window."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    @property
    def millis(self) -> int:
        return _UNIT_TO_MILLISECONDS[self]

    def to_millis(self, amount: int) -> int:
        """Convert ``amount`` of this unit to milliseconds."""
        return int(amount) * self.millis

    @classmethod
    def parse(cls, value: Union[str, "TimeUnit"]) -> "TimeUnit":
        """Resolve names such as ``"SECONDS"``, ``"seconds"``, or ``"s"``."""
        if isinstance(value, TimeUnit):
            return value
        token = str(value).strip().lower()
        name = _UNIT_ALIASES.get(token)
        if name is None:
            raise ConfigurationError(
                f"Unknown time unit '{value}'. Expected one of: "
                + ", ".join(unit.value for unit in cls)
            )
        return cls[name]


_UNIT_TO_MILLISECONDS = {
    TimeUnit.MILLISECONDS: 1,
    TimeUnit.SECONDS: 1000,
    TimeUnit.MINUTES: 60_000,
    TimeUnit.HOURS: 3_600_000,
    TimeUnit.DAYS: 86_400_000,
}


def wall_clock_ms() -> int:
    """Milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class RateLimiter(Protocol):
    """Anything that can admit or defer a single submission."""

    def try_acquire(self) -> bool:
        """Return ``True`` if the caller may proceed with one submission."""
        ...


@dataclass(frozen=True)
class WindowSnapshot:
    """Point-in-time view of a fixed-window limiter."""

    threshold: int
    window_ms: int
    window_start_ms: int
    counter: int

    @property
    def saturated(self) -> bool:
        return self.counter >= self.threshold


def _window_ms(time_unit: Union[str, TimeUnit], window_units: int) -> int:
    if window_units <= 0:
        raise ConfigurationError(f"window_units must be positive, got {window_units}")
    return TimeUnit.parse(time_unit).to_millis(window_units)


def _check_threshold(threshold: int) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise ConfigurationError(f"threshold must be an integer, got {threshold!r}")
    if threshold < 0:
        raise ConfigurationError(f"threshold must be >= 0, got {threshold}")
    return threshold


class FixedWindowRateLimiter:
    """Admit at most ``threshold`` callers per fixed window.

    Time is divided into windows of ``window_units`` x ``time_unit``. The window
    starts at construction time and rolls on the first call that observes it
    has expired, however long the limiter sat idle. The expiry check, the reset,
    and the increment all run under one lock, so concurrent callers observing
    the same boundary produce exactly one roll and a rejected call leaves the
    counter untouched.

    A clock that moves backwards never triggers a roll; callers are rejected
    until wall time passes the old ``window_start + window_ms``.
    """

    def __init__(
        self,
        threshold: int,
        time_unit: Union[str, TimeUnit] = TimeUnit.SECONDS,
        *,
        window_units: int = 1,
        clock: Callable[[], int] = wall_clock_ms,
    ) -> None:
        self._threshold = _check_threshold(threshold)
        self._window_ms = _window_ms(time_unit, window_units)
        self._clock = clock
        self._lock = threading.Lock()
        self._window_start = int(clock())
        self._counter = 0
        self._resets = 0
        self._saturation_logged = False

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def resets(self) -> int:
        """Number of window rolls performed so far."""
        with self._lock:
            return self._resets

    def try_acquire(self) -> bool:
        """Take one permit from the current window if any are left."""
        now = int(self._clock())
        with self._lock:
            if now - self._window_start >= self._window_ms:
                LOGGER.debug(
                    "rate-window-roll",
                    extra={
                        "extra_fields": {
                            "admitted": self._counter,
                            "idle_ms": now - self._window_start,
                        }
                    },
                )
                self._window_start = now
                self._counter = 0
                self._resets += 1
                self._saturation_logged = False

            if self._counter < self._threshold:
                self._counter += 1
                return True

            if not self._saturation_logged:
                self._saturation_logged = True
                LOGGER.debug(
                    "rate-window-saturated",
                    extra={
                        "extra_fields": {
                            "threshold": self._threshold,
                            "window_ms": self._window_ms,
                        }
                    },
                )
            return False

    def snapshot(self) -> WindowSnapshot:
        with self._lock:
            return WindowSnapshot(
                threshold=self._threshold,
                window_ms=self._window_ms,
                window_start_ms=self._window_start,
                counter=self._counter,
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(threshold={self._threshold}, window_ms={self._window_ms})"


class SlidingWindowRateLimiter:
    """Admit at most ``threshold`` callers in any rolling window, via pyrate-limiter."""

    def __init__(
        self,
        threshold: int,
        time_unit: Union[str, TimeUnit] = TimeUnit.SECONDS,
        *,
        window_units: int = 1,
        name: str = "crpt:documents/create",
    ) -> None:
        self._threshold = _check_threshold(threshold)
        self._window_ms = _window_ms(time_unit, window_units)
        self._name = name
        self._limiter: Limiter | None = None
        if self._threshold > 0:
            self._limiter = Limiter(
                Rate(self._threshold, self._window_ms), raise_when_fail=False, max_delay=None
            )

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def try_acquire(self) -> bool:
        if self._limiter is None:
            return False
        return self._limiter.try_acquire(self._name, weight=1) is True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(threshold={self._threshold}, window_ms={self._window_ms})"


def build_rate_limiter(
    strategy: Strategy,
    threshold: int,
    time_unit: Union[str, TimeUnit],
    *,
    window_units: int = 1,
) -> RateLimiter:
    """Construct the limiter named by ``strategy`` (``"fixed"`` or ``"sliding"``)."""
    if strategy == "fixed":
        return FixedWindowRateLimiter(threshold, time_unit, window_units=window_units)
    if strategy == "sliding":
        return SlidingWindowRateLimiter(threshold, time_unit, window_units=window_units)
    raise ConfigurationError(f"Unknown rate limit strategy '{strategy}'")


__all__ = [
    "TimeUnit",
    "RateLimiter",
    "WindowSnapshot",
    "FixedWindowRateLimiter",
    "SlidingWindowRateLimiter",
    "build_rate_limiter",
    "wall_clock_ms",
]

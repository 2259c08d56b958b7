"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: check-and-increment happens under a lock that is never held
  across I/O.
- Bounded: expired windows are swept periodically and the number of tracked
  keys is capped. At the cap, expired windows are dropped first, then the
  least recently used live window, preferring ones with quota left.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from weather_proxy.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class _WindowState:
    window_start: float
    count: int


class InMemoryRateLimiter(AbstractRateLimiter):
    """Rate limiter counting points per key within a fixed window.

    A key's window starts at its first request and lasts ``duration``
    seconds; once ``now >= window_start + duration`` the next request starts
    a fresh window with the count reset to zero.

    Important:
        This limiter is per-process only. If the API runs with multiple
        workers, each worker enforces its own independent limits.
    """

    def __init__(
        self,
        *,
        points: int,
        duration: float,
        max_keys: int | None = 10000,
        sweep_interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            points: Maximum number of points consumable per window.
            duration: Window length in seconds.
            max_keys: Maximum number of tracked keys (None for unlimited).
            sweep_interval_seconds: Minimum time between expired-window sweeps.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If any limit is invalid.
        """
        if points < 1:
            raise ValueError("points must be >= 1")
        if duration <= 0:
            raise ValueError("duration must be > 0")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1")

        self._points = points
        self._duration = duration
        self._max_keys = max_keys
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: OrderedDict[str, _WindowState] = OrderedDict()
        self._last_sweep = clock()
        self._evictions = 0

    @property
    def points(self) -> int:
        return self._points

    @property
    def duration(self) -> float:
        return self._duration

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _is_expired(self, state: _WindowState, now: float) -> bool:
        return now >= state.window_start + self._duration

    def _get_or_reset_state_locked(self, key: str, now: float) -> _WindowState:
        state = self._windows.get(key)
        if state is None or self._is_expired(state, now):
            state = _WindowState(window_start=now, count=0)
            self._windows[key] = state
        self._windows.move_to_end(key)
        return state

    def _sweep_expired_locked(self, now: float, *, force: bool = False) -> None:
        if not force and now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now

        expired = [k for k, state in self._windows.items() if self._is_expired(state, now)]
        for key in expired:
            del self._windows[key]
        self._evictions += len(expired)

        if expired:
            logger.debug(
                "rate_limit.sweep",
                extra={"evicted": len(expired), "tracked_keys": len(self._windows)},
            )

    def _evict_over_capacity_locked(self, current_key: str, now: float) -> None:
        if self._max_keys is None or len(self._windows) <= self._max_keys:
            return

        self._sweep_expired_locked(now, force=True)

        while len(self._windows) > self._max_keys:
            # Exhausted windows go last so a blocked client cannot get a fresh quota
            victim = self._pick_live_victim_locked(current_key)
            if victim is None:
                return
            del self._windows[victim]
            self._evictions += 1
            logger.warning(
                "rate_limit.live_window_evicted",
                extra={"tracked_keys": len(self._windows), "max_keys": self._max_keys},
            )

    def _pick_live_victim_locked(self, current_key: str) -> str | None:
        fallback: str | None = None
        # Least recently used key sits at the front
        for key, state in self._windows.items():
            if key == current_key:
                continue
            if state.count < self._points:
                return key
            if fallback is None:
                fallback = key
        return fallback

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume points for the provided key.

        Checks the key's current window and, if the request is allowed,
        records the consumption in the same critical section.

        Args:
            key: Client identifier.
            cost: Points to consume (default 1).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            self._sweep_expired_locked(now)
            state = self._get_or_reset_state_locked(key, now)
            self._evict_over_capacity_locked(key, now)

            reset_at = state.window_start + self._duration
            if state.count + cost <= self._points:
                state.count += cost
                return RateLimitResult(
                    allowed=True,
                    limit=self._points,
                    remaining=self._points - state.count,
                    reset_at=int(math.ceil(reset_at)),
                    retry_after_seconds=None,
                )

            return RateLimitResult(
                allowed=False,
                limit=self._points,
                remaining=max(0, self._points - state.count),
                reset_at=int(math.ceil(reset_at)),
                retry_after_seconds=max(1, int(math.ceil(reset_at - now))),
            )

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._evictions = 0

    def stats(self) -> dict[str, int | float | None]:
        """Return lightweight limiter metrics without exposing keys."""

        with self._lock:
            return {
                "points": self._points,
                "duration": self._duration,
                "max_keys": self._max_keys,
                "tracked_keys": len(self._windows),
                "evictions": self._evictions,
            }

"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
in-memory store can later be swapped for a shared one (e.g., Redis) when the
service is scaled horizontally.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max points per window.
        remaining: Remaining points in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for a given key.

        Args:
            key: Client identifier (e.g., IP address).
            cost: Points to consume (default 1).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Drop all tracked windows."""
        raise NotImplementedError

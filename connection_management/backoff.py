"""
Reconnection Backoff

Tracks the geometric backoff applied between reconnection attempts and the
count of consecutive attempts made since the connection was last known to
be healthy. Once the count reaches the configured maximum, the next failure
is treated as fatal by the supervisor.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Static reconnection policy.

    Defaults: first reconnection after 2 seconds, each further one five
    times later than the previous, at most five attempts in a row.
    """
    base_interval: float = 2.0
    multiplier: float = 5.0
    max_retries: int = 5

    def __post_init__(self):
        if self.base_interval < 0:
            raise ValueError("base_interval cannot be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")


class BackoffTracker:
    """
    Mutable retry counter and backoff interval.

    Example:
        >>> tracker = BackoffTracker(BackoffPolicy(base_interval=2.0))
        >>> tracker.record_attempt()
        >>> tracker.interval, tracker.retry_count
        (10.0, 1)
        >>> tracker.reset()
        >>> tracker.interval, tracker.retry_count
        (2.0, 0)
    """

    def __init__(self, policy: BackoffPolicy = None):
        self.policy = policy or BackoffPolicy()
        self._retry_count = 0
        self._interval = self.policy.base_interval

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def interval(self) -> float:
        """Delay to wait before the next reconnection attempt, in seconds."""
        return self._interval

    @property
    def exhausted(self) -> bool:
        """True when one more reconnection would exceed ``max_retries``."""
        return self._retry_count + 1 > self.policy.max_retries

    @property
    def is_reset(self) -> bool:
        return self._retry_count == 0 and self._interval == self.policy.base_interval

    def record_attempt(self) -> None:
        """Account for one reconnection attempt."""
        self._retry_count += 1
        self._interval *= self.policy.multiplier
        logger.debug(f"Reconnection attempt {self._retry_count}, next backoff {self._interval:.2f}s")

    def reset(self) -> None:
        self._retry_count = 0
        self._interval = self.policy.base_interval

    def to_dict(self) -> Dict[str, Any]:
        return {
            "retry_count": self._retry_count,
            "max_retries": self.policy.max_retries,
            "backoff_interval": self._interval,
            "base_interval": self.policy.base_interval,
        }

    def __repr__(self) -> str:
        return (
            f"BackoffTracker(retry_count={self._retry_count}/{self.policy.max_retries}, "
            f"interval={self._interval:.2f}s)"
        )

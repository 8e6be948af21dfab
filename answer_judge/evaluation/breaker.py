from __future__ import annotations

import logging
from threading import Lock

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_THRESHOLD = 2


class CircuitBreakerState:
    """Consecutive remote-judge failures, shared by every evaluation.

    Once ``failures`` reaches ``threshold`` the breaker is open and the
    remote tier is skipped until :meth:`record_success` or :meth:`reset`.
    Mutations are lock-guarded so concurrent evaluations never lose an
    increment.
    """

    def __init__(self, threshold: int = DEFAULT_FAILURE_THRESHOLD) -> None:
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self._threshold = threshold
        self._failures = 0
        self._lock = Lock()

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._failures >= self._threshold

    def record_failure(self) -> int:
        """Count one remote failure and return the new consecutive total."""
        with self._lock:
            self._failures += 1
            failures = self._failures
        if failures == self._threshold:
            logger.warning(
                "Remote judge failed %d times in a row; bypassing it until reset",
                failures,
            )
        return failures

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0

    def reset(self) -> None:
        with self._lock:
            self._failures = 0
        logger.info("Remote judge failure counter reset")

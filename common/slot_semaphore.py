"""
Slot semaphore bounding how many tasks a worker pool holds at once.
"""

import threading
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class SlotSemaphore:
    """A counting semaphore with precise in-flight tracking and a drain wait."""

    def __init__(self, permits: int):
        """Initialize the semaphore with the given number of permits.

        Args:
            permits: Number of permits available
        """
        if permits < 1:
            raise ValueError(f"SlotSemaphore needs at least one permit, got {permits}")
        self._permits = permits
        self._max_permits = permits
        self._in_flight = 0
        self._lock = threading.RLock()
        self._condition = threading.Condition(self._lock)

        logger.debug(f"Initialized SlotSemaphore with {permits} permits")

    def try_acquire(self) -> bool:
        """Take a permit if one is free, without blocking.

        Returns:
            True if a permit was acquired, False if none was available
        """
        with self._condition:
            if self._permits <= 0:
                return False
            self._permits -= 1
            self._in_flight += 1
            return True

    def release(self) -> None:
        """Release a permit back to the semaphore."""
        with self._condition:
            if self._in_flight > 0:
                self._in_flight -= 1
                self._permits += 1
                self._condition.notify_all()
            else:
                logger.warning("Attempted to release semaphore when in_flight is 0")

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no permit is held.

        Args:
            timeout: Maximum time to wait (None = wait forever)

        Returns:
            True if the semaphore became idle, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(lambda: self._in_flight == 0, timeout)

    def in_flight(self) -> int:
        """Get the current number of held permits."""
        with self._lock:
            return self._in_flight

    def available_permits(self) -> int:
        """Get the number of available permits."""
        with self._lock:
            return self._permits

    def max_permits(self) -> int:
        """Get the maximum number of permits."""
        with self._lock:
            return self._max_permits

    def __repr__(self) -> str:
        return f"SlotSemaphore(permits={self._permits}/{self._max_permits}, in_flight={self._in_flight})"

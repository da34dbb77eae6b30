"""
Throttle gate enforcing a minimum pause between consecutive items.
"""

import logging
import time
from typing import Callable, Iterable, Iterator, Optional, TypeVar

T = TypeVar('T')


class Throttle:
    """Serializes work items with a minimum interval between them."""

    def __init__(
        self,
        interval: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            interval: Minimum seconds between the end of one item and the start of the next
            sleep: Sleep function, injectable for tests
            clock: Monotonic clock, injectable for tests
        """
        if interval < 0:
            raise ValueError(f"Throttle interval must be >= 0, got {interval}")

        self.interval = interval
        self._sleep = sleep
        self._clock = clock
        self._released_at: Optional[float] = None
        self.logger = logging.getLogger('Throttle')

    def iterate(self, items: Iterable[T]) -> Iterator[T]:
        """
        Yield items one at a time, pausing between consecutive items.

        No pause happens before the first item or after the last one.
        """
        self._released_at = None
        for item in items:
            self._pause()
            yield item
            self._released_at = self._clock()

    def _pause(self) -> None:
        if self._released_at is None:
            return

        remaining = self.interval - (self._clock() - self._released_at)
        if remaining > 0:
            self.logger.debug(f"Waiting {remaining:.2f}s before next check")
            self._sleep(remaining)

"""Deferred layout measurements.

Some inputs (such as the chart area height) can only be read after the
presentation layer has committed a layout change. Requests are deferred
to the next frame; when several are in flight only the newest one is
applied, older ones are discarded by generation number.
"""

from collections import deque
from typing import Any, Callable

from loguru import logger


class FrameQueue:
    """A minimal next-frame callback queue.

    The presentation loop calls :meth:`run_frame` once per frame; callbacks
    deferred while a frame runs wait for the following frame.
    """

    def __init__(self):
        self._pending: deque[Callable[[], Any]] = deque()

    def defer(self, callback: Callable[[], Any]):
        self._pending.append(callback)

    def run_frame(self) -> int:
        """Run the callbacks queued before this frame; returns how many ran."""
        batch = list(self._pending)
        self._pending.clear()
        for callback in batch:
            callback()
        return len(batch)

    def __len__(self) -> int:
        return len(self._pending)


class FrameScheduler:
    """Schedules "read after the next frame, then apply" measurements."""

    def __init__(self, defer: Callable[[Callable[[], Any]], Any]):
        self._defer = defer
        self._generation = 0
        self._applied = 0
        self._discarded = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def discarded(self) -> int:
        return self._discarded

    @property
    def last_applied(self) -> int:
        return self._applied

    def request(self, measure: Callable[[], Any], apply: Callable[[Any], Any]) -> int:
        """Defer ``apply(measure())``; returns the request's generation."""
        self._generation += 1
        generation = self._generation

        def run():
            if generation != self._generation:
                self._discarded += 1
                logger.debug(f"Discarding stale measurement {generation} (latest {self._generation})")
                return
            apply(measure())
            self._applied = generation

        self._defer(run)
        return generation

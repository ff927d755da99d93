"""Fixed-interval scheduler that runs one collect-and-push task per tick."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from .errors import AgemonError

logger = logging.getLogger(__name__)


class IntervalScheduler:
    """Runs *task* every *interval* seconds without drifting.

    Each tick measures how long the task took on a monotonic clock and
    waits only for the rest of the interval.  When the task overruns,
    the next tick starts immediately; missed ticks are not replayed.
    Task failures are logged and never stop the loop.
    """

    def __init__(
        self,
        interval: float,
        task: Callable[[], object],
        clock: Callable[[], float] = time.monotonic,
        stop_event: threading.Event | None = None,
    ) -> None:
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"interval must be positive and finite, got {interval}")
        self._interval = float(interval)
        self._task = task
        self._clock = clock
        self._stop_event = stop_event if stop_event is not None else threading.Event()
        self.ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def tick(self) -> float:
        """Run the task once and wait out the interval.

        Returns the number of seconds waited.
        """
        start = self._clock()
        try:
            self._task()
        except AgemonError as exc:
            logger.error("Cycle failed: %s", exc)
        except Exception:
            logger.exception("Cycle failed unexpectedly")
        self.ticks += 1

        elapsed = self._clock() - start
        remaining = self._interval - elapsed
        if remaining <= 0:
            logger.warning(
                "Cycle took %.3fs, longer than the %.1fs interval", elapsed, self._interval,
            )
            return 0.0
        self._stop_event.wait(remaining)
        return remaining

    def run(self, max_ticks: int | None = None) -> None:
        """Tick until :meth:`stop` is called or *max_ticks* have run."""
        logger.info("Scheduler started (interval=%.1fs)", self._interval)
        while not self._stop_event.is_set():
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            self.tick()
        logger.info("Scheduler stopped after %d ticks", self.ticks)

    def stop(self) -> None:
        self._stop_event.set()

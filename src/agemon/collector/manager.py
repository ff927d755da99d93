"""Metrics aggregator that runs every collector against one snapshot."""

from __future__ import annotations

import logging
import time
from typing import Callable

from .base import BaseCollector, CycleSnapshot, TimeSeries, or_unknown
from .cpu import CpuCollector
from .disk import DiskCollector
from .memory import MemoryCollector
from .network import NetworkCollector
from .sampler import HostSampler
from .system import SystemCollector

logger = logging.getLogger(__name__)


def default_collectors() -> list[BaseCollector]:
    """The collectors in the order their series are emitted."""
    return [
        CpuCollector(),
        MemoryCollector(),
        DiskCollector(),
        NetworkCollector(),
        SystemCollector(),
    ]


class MetricsAggregator:
    """Collects one cycle's worth of time-series.

    Each :meth:`collect` call refreshes the sampler once, fixes the
    hostname and a millisecond timestamp for the cycle, then concatenates
    the output of every collector in order.  The sampler is owned by the
    aggregator and must not be shared with another caller.
    """

    def __init__(
        self,
        sampler: HostSampler | None = None,
        collectors: list[BaseCollector] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sampler = sampler if sampler is not None else HostSampler()
        self._collectors = collectors if collectors is not None else default_collectors()
        self._clock = clock

    @property
    def collectors(self) -> list[BaseCollector]:
        return list(self._collectors)

    def snapshot(self) -> CycleSnapshot:
        return CycleSnapshot(
            hostname=or_unknown(self._sampler.hostname()),
            timestamp=int(self._clock() * 1000),
        )

    def collect(self) -> list[TimeSeries]:
        """Refresh the sampler and return every collector's series."""
        self._sampler.refresh()
        snapshot = self.snapshot()

        all_series: list[TimeSeries] = []
        for collector in self._collectors:
            all_series.extend(collector.collect(self._sampler, snapshot))
        logger.debug(
            "Collected %d series from %d collectors (ts=%d)",
            len(all_series),
            len(self._collectors),
            snapshot.timestamp,
        )
        return all_series

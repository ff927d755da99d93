"""Memory and swap metric collector."""

from __future__ import annotations

from .base import BaseCollector, CycleSnapshot, TimeSeries, make_series, usage_ratio
from .sampler import HostSampler


class MemoryCollector(BaseCollector):
    """Collects memory and swap gauges.

    The ``*_usage_ratio`` gauges are ``used / total`` and read ``0.0``
    when the total is zero, e.g. on hosts without swap.
    """

    @property
    def name(self) -> str:
        return "memory"

    def collect(self, sampler: HostSampler, snapshot: CycleSnapshot) -> list[TimeSeries]:
        mem = sampler.memory
        swap = sampler.swap
        return [
            make_series("agemon_memory_total_bytes", mem.total, snapshot),
            make_series("agemon_memory_used_bytes", mem.used, snapshot),
            make_series("agemon_memory_free_bytes", mem.free, snapshot),
            make_series("agemon_memory_available_bytes", mem.available, snapshot),
            make_series("agemon_memory_usage_ratio", usage_ratio(mem.used, mem.total), snapshot),
            make_series("agemon_swap_total_bytes", swap.total, snapshot),
            make_series("agemon_swap_used_bytes", swap.used, snapshot),
            make_series("agemon_swap_free_bytes", swap.free, snapshot),
            make_series("agemon_swap_usage_ratio", usage_ratio(swap.used, swap.total), snapshot),
        ]

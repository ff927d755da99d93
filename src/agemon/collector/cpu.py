"""CPU metric collector."""

from __future__ import annotations

from .base import BaseCollector, CycleSnapshot, TimeSeries, make_series
from .sampler import HostSampler


class CpuCollector(BaseCollector):
    """Emits aggregate usage, core count and per-core usage gauges."""

    @property
    def name(self) -> str:
        return "cpu"

    def collect(self, sampler: HostSampler, snapshot: CycleSnapshot) -> list[TimeSeries]:
        cpu = sampler.cpu
        series = [
            make_series("agemon_cpu_usage_percent", cpu.usage, snapshot),
            make_series("agemon_cpu_count", cpu.count, snapshot),
        ]
        for idx, pct in enumerate(cpu.per_core):
            series.append(make_series(
                "agemon_cpu_core_usage_percent", pct, snapshot, [("cpu", str(idx))],
            ))
        return series

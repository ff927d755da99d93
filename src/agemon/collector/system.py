"""System uptime, load and identity collector."""

from __future__ import annotations

from .base import BaseCollector, CycleSnapshot, TimeSeries, make_series, or_unknown
from .sampler import HostSampler

INFO_METRIC = "agemon_info"


class SystemCollector(BaseCollector):
    """Collects uptime, boot time, load averages and the ``agemon_info`` series.

    ``agemon_info`` always has the value ``1.0``.  It exists to carry the
    OS identity strings as labels, since a sample value can only be a
    number.  Join on ``hostname`` to attach them to other series.
    """

    @property
    def name(self) -> str:
        return "system"

    def collect(self, sampler: HostSampler, snapshot: CycleSnapshot) -> list[TimeSeries]:
        info = sampler.system()
        return [
            make_series("agemon_system_uptime_seconds", info.uptime, snapshot),
            make_series("agemon_system_boot_time_seconds", info.boot_time, snapshot),
            make_series("agemon_system_load_average_1m", info.load_1, snapshot),
            make_series("agemon_system_load_average_5m", info.load_5, snapshot),
            make_series("agemon_system_load_average_15m", info.load_15, snapshot),
            make_series(INFO_METRIC, 1.0, snapshot, [
                ("os_name", or_unknown(info.os_name)),
                ("os_version", or_unknown(info.os_version)),
                ("kernel_version", or_unknown(info.kernel_version)),
                ("arch", or_unknown(info.arch)),
            ]),
        ]

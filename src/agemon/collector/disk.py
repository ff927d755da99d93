"""Filesystem metric collector."""

from __future__ import annotations

from .base import BaseCollector, CycleSnapshot, TimeSeries, make_series, or_unknown, usage_ratio
from .sampler import HostSampler


class DiskCollector(BaseCollector):
    """Collects space usage for every mounted filesystem.

    Each series is labeled with ``mount_point``, ``device`` and
    ``fs_type``.  Used space is ``total - available``, clamped at zero
    because some filesystems report more free space than capacity.
    """

    @property
    def name(self) -> str:
        return "disk"

    def collect(self, sampler: HostSampler, snapshot: CycleSnapshot) -> list[TimeSeries]:
        series: list[TimeSeries] = []
        for disk in sampler.disks:
            labels = [
                ("mount_point", or_unknown(disk.mount_point)),
                ("device", or_unknown(disk.device)),
                ("fs_type", or_unknown(disk.fs_type)),
            ]
            used = max(0, disk.total - disk.available)
            series.extend([
                make_series("agemon_disk_total_bytes", disk.total, snapshot, labels),
                make_series("agemon_disk_available_bytes", disk.available, snapshot, labels),
                make_series("agemon_disk_used_bytes", used, snapshot, labels),
                make_series("agemon_disk_usage_ratio", usage_ratio(used, disk.total), snapshot, labels),
                make_series("agemon_disk_removable", 1.0 if disk.removable else 0.0, snapshot, labels),
            ])
        return series

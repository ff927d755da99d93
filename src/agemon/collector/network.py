"""Network interface metric collector."""

from __future__ import annotations

from .base import BaseCollector, CycleSnapshot, TimeSeries, make_series, or_unknown
from .sampler import HostSampler


class NetworkCollector(BaseCollector):
    """Collects cumulative traffic and error counters per interface.

    Values are the raw counters since boot; rates are left to the
    monitoring backend.
    """

    @property
    def name(self) -> str:
        return "network"

    def collect(self, sampler: HostSampler, snapshot: CycleSnapshot) -> list[TimeSeries]:
        series: list[TimeSeries] = []
        for nic in sampler.networks:
            labels = [("interface", or_unknown(nic.interface))]
            series.extend([
                make_series("agemon_network_received_bytes_total", nic.bytes_received, snapshot, labels),
                make_series("agemon_network_transmitted_bytes_total", nic.bytes_transmitted, snapshot, labels),
                make_series("agemon_network_received_packets_total", nic.packets_received, snapshot, labels),
                make_series("agemon_network_transmitted_packets_total", nic.packets_transmitted, snapshot, labels),
                make_series("agemon_network_receive_errors_total", nic.receive_errors, snapshot, labels),
                make_series("agemon_network_transmit_errors_total", nic.transmit_errors, snapshot, labels),
            ])
        return series

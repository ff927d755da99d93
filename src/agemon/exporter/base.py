"""Base interface for time-series exporters."""

from __future__ import annotations

import abc

from ..collector.base import TimeSeries


class BaseExporter(abc.ABC):
    """Abstract base for exporters that receive one cycle's series."""

    @abc.abstractmethod
    def export(self, series: list[TimeSeries]) -> None:
        """Export a batch of series."""

    @abc.abstractmethod
    def shutdown(self) -> None:
        """Flush and release resources."""

"""Time-series data model and the base interface for metric collectors."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from .sampler import HostSampler

METRIC_NAME_LABEL = "__name__"
HOSTNAME_LABEL = "hostname"
METRIC_PREFIX = "agemon_"
UNKNOWN = "unknown"


@dataclass(frozen=True)
class Label:
    """A single ``name=value`` dimension of a time-series."""

    name: str
    value: str


@dataclass(frozen=True)
class Sample:
    """A value observed at *timestamp* (milliseconds since the Unix epoch)."""

    value: float
    timestamp: int


@dataclass
class TimeSeries:
    """A labeled series holding the samples of one collection cycle."""

    labels: list[Label]
    samples: list[Sample] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.label(METRIC_NAME_LABEL) or ""

    def label(self, key: str, default: str | None = None) -> str | None:
        for lbl in self.labels:
            if lbl.name == key:
                return lbl.value
        return default


@dataclass(frozen=True)
class CycleSnapshot:
    """Hostname and timestamp shared by every series of one cycle."""

    hostname: str
    timestamp: int


def label_text(value: str) -> str:
    """Return *value* as valid UTF-8.

    psutil hands back undecodable OS bytes as lone surrogates, which
    protobuf refuses to serialize.  Those bytes become U+FFFD.
    """
    try:
        raw = value.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        raw = value.encode("utf-8", "surrogatepass")
    return raw.decode("utf-8", "replace")


def build_labels(
    name: str,
    hostname: str,
    extra: Iterable[tuple[str, str]] | None = None,
) -> list[Label]:
    """Build the label set for a series.

    The metric name comes first, then ``hostname``, then *extra* in the
    order given.  Label names must be unique within the set.
    Values are passed through :func:`label_text`.
    """
    if not name.startswith(METRIC_PREFIX):
        raise ValueError(f"metric name {name!r} must start with {METRIC_PREFIX!r}")

    labels = [Label(METRIC_NAME_LABEL, name), Label(HOSTNAME_LABEL, label_text(hostname))]
    seen = {METRIC_NAME_LABEL, HOSTNAME_LABEL}
    for key, value in extra or ():
        if key in seen:
            raise ValueError(f"duplicate label {key!r} for metric {name!r}")
        seen.add(key)
        labels.append(Label(key, label_text(value)))
    return labels


def make_series(
    name: str,
    value: float,
    snapshot: CycleSnapshot,
    extra: Iterable[tuple[str, str]] | None = None,
) -> TimeSeries:
    """Return a single-sample series stamped with the cycle timestamp."""
    return TimeSeries(
        labels=build_labels(name, snapshot.hostname, extra),
        samples=[Sample(float(value), snapshot.timestamp)],
    )


def or_unknown(value: str | None) -> str:
    """Resolve a missing OS string to the ``"unknown"`` fallback."""
    return value if value else UNKNOWN


def usage_ratio(used: float, total: float) -> float:
    """``used / total``, or ``0.0`` when *total* is not positive."""
    if total > 0:
        return float(used) / float(total)
    return 0.0


class BaseCollector(abc.ABC):
    """Abstract base class for metric collectors.

    A collector only reads the already refreshed *sampler*; it performs
    no I/O of its own and must never raise for missing readings.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name used in logs."""

    @abc.abstractmethod
    def collect(self, sampler: HostSampler, snapshot: CycleSnapshot) -> list[TimeSeries]:
        """Turn the sampler's current readings into time-series."""

    def to_dict(self, series: list[TimeSeries]) -> list[dict[str, Any]]:
        """Serialize series to plain dictionaries."""
        return series_to_dicts(series)


def series_to_dicts(series: list[TimeSeries]) -> list[dict[str, Any]]:
    return [
        {
            "name": s.name,
            "labels": {lbl.name: lbl.value for lbl in s.labels if lbl.name != METRIC_NAME_LABEL},
            "value": s.samples[0].value if s.samples else None,
            "timestamp": s.samples[0].timestamp if s.samples else None,
        }
        for s in series
    ]

"""Prometheus remote-write (v1) request encoder.

The ``prometheus.WriteRequest`` message is declared at import time
through a protobuf descriptor pool, so no generated ``_pb2`` module is
needed.  Only the fields agemon sends are declared; field numbers match
``prompb/remote.proto`` and ``prompb/types.proto``.
"""

from __future__ import annotations

import logging

import requests
import snappy
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from .. import __version__
from ..collector.base import TimeSeries
from ..errors import BuildError

logger = logging.getLogger(__name__)

REMOTE_WRITE_VERSION = "0.1.0"

_Field = descriptor_pb2.FieldDescriptorProto


def _message_classes() -> dict[str, type]:
    proto = descriptor_pb2.FileDescriptorProto(
        name="agemon/prompb_remote.proto",
        package="prometheus",
        syntax="proto3",
    )

    label = proto.message_type.add(name="Label")
    label.field.add(name="name", number=1, type=_Field.TYPE_STRING, label=_Field.LABEL_OPTIONAL)
    label.field.add(name="value", number=2, type=_Field.TYPE_STRING, label=_Field.LABEL_OPTIONAL)

    sample = proto.message_type.add(name="Sample")
    sample.field.add(name="value", number=1, type=_Field.TYPE_DOUBLE, label=_Field.LABEL_OPTIONAL)
    sample.field.add(name="timestamp", number=2, type=_Field.TYPE_INT64, label=_Field.LABEL_OPTIONAL)

    series = proto.message_type.add(name="TimeSeries")
    series.field.add(
        name="labels", number=1, type=_Field.TYPE_MESSAGE,
        type_name=".prometheus.Label", label=_Field.LABEL_REPEATED,
    )
    series.field.add(
        name="samples", number=2, type=_Field.TYPE_MESSAGE,
        type_name=".prometheus.Sample", label=_Field.LABEL_REPEATED,
    )

    write_request = proto.message_type.add(name="WriteRequest")
    write_request.field.add(
        name="timeseries", number=1, type=_Field.TYPE_MESSAGE,
        type_name=".prometheus.TimeSeries", label=_Field.LABEL_REPEATED,
    )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(proto.SerializeToString())
    return {
        name: message_factory.GetMessageClass(pool.FindMessageTypeByName(f"prometheus.{name}"))
        for name in ("Label", "Sample", "TimeSeries", "WriteRequest")
    }


_MESSAGES = _message_classes()
WriteRequest = _MESSAGES["WriteRequest"]


def to_write_request(series: list[TimeSeries]):
    """Build a ``WriteRequest`` message; labels are sorted by name on the wire."""
    message = WriteRequest()
    for ts in series:
        pb_series = message.timeseries.add()
        for lbl in sorted(ts.labels, key=lambda item: item.name):
            pb_series.labels.add(name=lbl.name, value=lbl.value)
        for sample in ts.samples:
            pb_series.samples.add(value=sample.value, timestamp=sample.timestamp)
    return message


class RemoteWriteEncoder:
    """Turns a batch of series into a ready-to-send HTTP request."""

    def __init__(self, user_agent: str | None = None) -> None:
        self._user_agent = user_agent or f"agemon/{__version__}"

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/x-protobuf",
            "Content-Encoding": "snappy",
            "X-Prometheus-Remote-Write-Version": REMOTE_WRITE_VERSION,
            "User-Agent": self._user_agent,
        }

    def encode(self, series: list[TimeSeries]) -> bytes:
        """Serialize and snappy-compress *series*."""
        payload = to_write_request(series).SerializeToString()
        return snappy.compress(payload)

    def build_request(self, series: list[TimeSeries], url: str) -> requests.PreparedRequest:
        """Return a prepared ``POST`` to *url*.

        Raises :class:`BuildError` if the URL is unusable or the series
        cannot be encoded; nothing is sent in that case.
        """
        try:
            body = self.encode(series)
            prepared = requests.Request("POST", url, data=body, headers=self.headers()).prepare()
        except (requests.RequestException, ValueError, TypeError) as exc:
            raise BuildError(f"cannot build remote-write request for {url!r}: {exc}") from exc
        logger.debug("Encoded %d series into %d bytes", len(series), len(body))
        return prepared

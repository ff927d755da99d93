"""Remote-write exporter - pushes series to a Prometheus-compatible endpoint."""

from __future__ import annotations

import base64
import logging

import requests

from ..collector.base import TimeSeries
from ..errors import TransportError
from .base import BaseExporter
from .encoder import RemoteWriteEncoder

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class RemoteWriteExporter(BaseExporter):
    """Pushes each batch of series with a single HTTP request.

    There is no retry: a failed push raises once and the next cycle
    starts from scratch.  Any HTTP response, whatever its status, counts
    as delivered at the transport level and is only logged.
    """

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        session: requests.Session | None = None,
        encoder: RemoteWriteEncoder | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._url = url
        self._auth = basic_auth_header(username, password) if username and password else None
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._encoder = encoder if encoder is not None else RemoteWriteEncoder()
        self._timeout = timeout
        logger.info(
            "RemoteWriteExporter initialized -> %s (auth=%s)",
            url,
            "basic" if self._auth else "none",
        )

    def __repr__(self) -> str:
        return f"RemoteWriteExporter(url={self._url!r}, auth={self._auth is not None})"

    @property
    def url(self) -> str:
        return self._url

    def push(self, series: list[TimeSeries]) -> requests.Response:
        """Encode and send *series*.

        Raises :class:`~agemon.errors.BuildError` when the request cannot
        be built and :class:`~agemon.errors.TransportError` when sending
        fails before a response arrives.
        """
        prepared = self._encoder.build_request(series, self._url)
        if self._auth is not None:
            prepared.headers["Authorization"] = self._auth

        try:
            response = self._session.send(prepared, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"remote write to {self._url} failed: {exc}") from exc

        if 200 <= response.status_code < 300:
            logger.info("Pushed %d series (status=%d)", len(series), response.status_code)
        else:
            logger.warning(
                "Remote write returned status %d: %s",
                response.status_code,
                (response.text or "")[:200],
            )
        return response

    def export(self, series: list[TimeSeries]) -> None:
        self.push(series)

    def shutdown(self) -> None:
        if self._owns_session:
            self._session.close()
        logger.info("RemoteWriteExporter shut down")

"""Exception hierarchy for agemon."""

from __future__ import annotations


class AgemonError(Exception):
    """Base class for errors raised by agemon."""


class ConfigError(AgemonError):
    """Configuration could not be loaded or is invalid."""


class BuildError(AgemonError):
    """A remote-write request could not be built from the collected series."""


class TransportError(AgemonError):
    """Sending a remote-write request failed at the network layer."""

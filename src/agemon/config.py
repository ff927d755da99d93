"""Configuration loading and validation for agemon."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

MODES = ("remote_write", "local")


@dataclass
class RemoteWriteConfig:
    """Remote-write endpoint settings."""

    url: str = "http://localhost:9090/api/v1/write"
    username: str | None = None
    password: str | None = None
    password_file: str | None = None
    timeout_seconds: float = 30.0

    def __repr__(self) -> str:
        return (
            f"RemoteWriteConfig(url={self.url!r}, username={self.username!r}, "
            f"password={'***' if self.password else None}, "
            f"password_file={self.password_file!r}, timeout_seconds={self.timeout_seconds})"
        )


@dataclass
class CollectorConfig:
    """Collection cadence."""

    interval_seconds: float = 15.0


@dataclass
class LocalExporterConfig:
    """Local file exporter settings."""

    output_dir: str = "./agemon_data"


@dataclass
class AgemonConfig:
    """Top-level agemon configuration."""

    mode: str = "remote_write"
    log_level: str = "INFO"
    remote_write: RemoteWriteConfig = field(default_factory=RemoteWriteConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    local_exporter: LocalExporterConfig = field(default_factory=LocalExporterConfig)


ENV_MAP: dict[str, tuple[str, ...]] = {
    "AGEMON_MODE": ("mode",),
    "AGEMON_LOG_LEVEL": ("log_level",),
    "AGEMON_INTERVAL": ("collector", "interval_seconds"),
    "AGEMON_REMOTE_WRITE_URL": ("remote_write", "url"),
    "AGEMON_REMOTE_WRITE_USERNAME": ("remote_write", "username"),
    "AGEMON_REMOTE_WRITE_PASSWORD": ("remote_write", "password"),
    "AGEMON_REMOTE_WRITE_PASSWORD_FILE": ("remote_write", "password_file"),
    "AGEMON_LOCAL_OUTPUT_DIR": ("local_exporter", "output_dir"),
}

_FLOAT_KEYS = {"interval_seconds", "timeout_seconds"}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using the AGEMON_ prefix."""
    for env_key, path in ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None or value == "":
            continue
        obj = data
        for part in path[:-1]:
            obj = obj.setdefault(part, {})
        final_key = path[-1]
        if final_key in _FLOAT_KEYS:
            try:
                obj[final_key] = float(value)
            except ValueError as exc:
                raise ConfigError(f"{env_key} must be a number, got {value!r}") from exc
        else:
            obj[final_key] = value
    return data


def _section(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        return cls()
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> AgemonConfig:
    """Convert a raw dictionary to an :class:`AgemonConfig`."""
    return AgemonConfig(
        mode=data.get("mode", "remote_write"),
        log_level=data.get("log_level", "INFO"),
        remote_write=_section(RemoteWriteConfig, data.get("remote_write")),
        collector=_section(CollectorConfig, data.get("collector")),
        local_exporter=_section(LocalExporterConfig, data.get("local_exporter")),
    )


def load_config(path: str | Path | None = None) -> AgemonConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``agemon.yaml`` in the current directory if *path* is None.
    A missing file is not an error; defaults and environment apply.
    """
    data: dict[str, Any] = {}
    path = Path("agemon.yaml") if path is None else Path(path)

    if path.exists():
        try:
            with open(path, encoding="utf-8") as fh:
                loaded = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"cannot read config file {path}: {exc}") from exc
        if isinstance(loaded, dict):
            data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)


def resolve_password(cfg: RemoteWriteConfig) -> str | None:
    """Return the configured password, reading *password_file* if needed."""
    if cfg.password:
        return cfg.password
    if not cfg.password_file:
        return None
    try:
        return Path(cfg.password_file).expanduser().read_text(encoding="utf-8").strip() or None
    except OSError as exc:
        raise ConfigError(f"cannot read password file {cfg.password_file}: {exc}") from exc


def _positive_seconds(what: str, value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{what} must be a number, got {value!r}") from exc
    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigError(f"{what} must be positive and finite, got {value!r}")
    return seconds


def validate(cfg: AgemonConfig) -> AgemonConfig:
    """Check *cfg* and return a copy with the password resolved."""
    if cfg.mode not in MODES:
        raise ConfigError(f"unknown mode {cfg.mode!r}, expected one of {', '.join(MODES)}")
    interval = _positive_seconds("interval", cfg.collector.interval_seconds)
    timeout = _positive_seconds("timeout", cfg.remote_write.timeout_seconds)

    remote_write = replace(
        cfg.remote_write,
        password=resolve_password(cfg.remote_write),
        timeout_seconds=timeout,
    )
    return replace(
        cfg,
        remote_write=remote_write,
        collector=replace(cfg.collector, interval_seconds=interval),
    )

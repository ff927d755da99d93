"""CLI interface for agemon."""

from __future__ import annotations

import argparse
import functools
import logging
import signal
import sys
from dataclasses import replace

from . import __version__
from .collector.manager import MetricsAggregator
from .config import MODES, AgemonConfig, load_config, validate
from .errors import AgemonError, ConfigError
from .exporter.base import BaseExporter
from .scheduler import IntervalScheduler

logger = logging.getLogger(__name__)


def _apply_cli_overrides(cfg: AgemonConfig, args: argparse.Namespace) -> AgemonConfig:
    """Command-line flags take precedence over the file and environment."""
    remote_write = cfg.remote_write
    if args.remote_write_url is not None:
        remote_write = replace(remote_write, url=args.remote_write_url)
    if args.username is not None:
        remote_write = replace(remote_write, username=args.username)
    if args.password is not None:
        remote_write = replace(remote_write, password=args.password)
    if args.password_file is not None:
        remote_write = replace(remote_write, password_file=args.password_file)

    collector = cfg.collector
    if args.interval is not None:
        collector = replace(collector, interval_seconds=args.interval)

    return replace(
        cfg,
        mode=args.mode if args.mode is not None else cfg.mode,
        log_level=args.log_level if args.log_level is not None else cfg.log_level,
        remote_write=remote_write,
        collector=collector,
    )


def build_exporter(cfg: AgemonConfig) -> BaseExporter:
    if cfg.mode == "local":
        from .exporter.local import LocalExporter
        return LocalExporter(cfg.local_exporter)

    from .exporter.remote_write import RemoteWriteExporter
    return RemoteWriteExporter(
        cfg.remote_write.url,
        username=cfg.remote_write.username,
        password=cfg.remote_write.password,
        timeout=cfg.remote_write.timeout_seconds,
    )


def collect_and_export(aggregator: MetricsAggregator, exporter: BaseExporter) -> None:
    """One cycle: collect every series and hand them to the exporter."""
    exporter.export(aggregator.collect())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agemon",
        description="Push host metrics to a Prometheus remote-write endpoint",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to agemon.yaml")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between collections (default 15)")
    parser.add_argument(
        "--remote-write-url",
        default=None,
        help="Remote write endpoint (env AGEMON_REMOTE_WRITE_URL)",
    )
    parser.add_argument("--username", default=None, help="Basic auth username (env AGEMON_REMOTE_WRITE_USERNAME)")
    parser.add_argument("--password", default=None, help="Basic auth password (env AGEMON_REMOTE_WRITE_PASSWORD)")
    parser.add_argument(
        "--password-file",
        default=None,
        help="Read the Basic auth password from this file (env AGEMON_REMOTE_WRITE_PASSWORD_FILE)",
    )
    parser.add_argument("--mode", choices=MODES, default=None, help="Where to send metrics")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("--log-level", default=None, help="Logging level (default INFO)")
    parser.add_argument("--version", action="version", version=f"agemon {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the agemon CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = validate(_apply_cli_overrides(load_config(args.config), args))
    except ConfigError as exc:
        print(f"agemon: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info(
        "agemon %s starting (mode=%s, url=%s, interval=%.1fs, auth=%s)",
        __version__,
        cfg.mode,
        cfg.remote_write.url,
        cfg.collector.interval_seconds,
        "basic" if cfg.remote_write.username and cfg.remote_write.password else "none",
    )

    aggregator = MetricsAggregator()
    exporter = build_exporter(cfg)
    task = functools.partial(collect_and_export, aggregator, exporter)
    scheduler = IntervalScheduler(cfg.collector.interval_seconds, task)

    def _handle_signal(_sig: int, _frame: object) -> None:
        scheduler.stop()

    previous = {sig: signal.signal(sig, _handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)}

    try:
        if args.once:
            task()
        else:
            scheduler.run()
    except AgemonError as exc:
        logger.error("Cycle failed: %s", exc)
        return 1
    finally:
        exporter.shutdown()
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return 0


if __name__ == "__main__":
    sys.exit(main())

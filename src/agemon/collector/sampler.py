"""OS counter sampler backed by psutil.

:class:`HostSampler` owns the readings of the current cycle.  The
aggregator calls :meth:`HostSampler.refresh` once per cycle and the
collectors then read the refreshed attributes; nothing else writes them.
"""

from __future__ import annotations

import logging
import platform
import socket
import time
from dataclasses import dataclass
from pathlib import Path

import psutil

logger = logging.getLogger(__name__)

SYS_CLASS_BLOCK = Path("/sys/class/block")


@dataclass(frozen=True)
class CpuReading:
    usage: float = 0.0
    per_core: tuple[float, ...] = ()
    count: int = 0


@dataclass(frozen=True)
class MemoryReading:
    total: int = 0
    used: int = 0
    free: int = 0
    available: int = 0


@dataclass(frozen=True)
class SwapReading:
    total: int = 0
    used: int = 0
    free: int = 0


@dataclass(frozen=True)
class DiskReading:
    mount_point: str
    device: str | None
    fs_type: str | None
    total: int
    available: int
    removable: bool = False


@dataclass(frozen=True)
class NetworkReading:
    interface: str
    bytes_received: int = 0
    bytes_transmitted: int = 0
    packets_received: int = 0
    packets_transmitted: int = 0
    receive_errors: int = 0
    transmit_errors: int = 0


@dataclass(frozen=True)
class SystemReading:
    uptime: float = 0.0
    boot_time: float = 0.0
    load_1: float = 0.0
    load_5: float = 0.0
    load_15: float = 0.0
    os_name: str | None = None
    os_version: str | None = None
    kernel_version: str | None = None
    arch: str | None = None


def _block_device_name(device: str) -> str | None:
    if not device.startswith("/dev/"):
        return None
    return Path(device).resolve().name or None


def is_removable(device: str | None, opts: str = "", sys_block: Path = SYS_CLASS_BLOCK) -> bool:
    """Best-effort removable media detection.

    Windows reports ``removable`` in the mount options.  On Linux the
    ``removable`` flag lives on the whole-disk entry in sysfs, so a
    partition falls back to its parent device.
    """
    if "removable" in opts.split(","):
        return True
    if not device:
        return False
    name = _block_device_name(device)
    if name is None:
        return False
    entry = sys_block / name
    try:
        resolved = entry.resolve(strict=True)
    except OSError:
        return False
    for candidate in (resolved / "removable", resolved.parent / "removable"):
        try:
            return candidate.read_text(encoding="utf-8").strip() == "1"
        except OSError:
            continue
    return False


def _os_release() -> dict[str, str]:
    try:
        return platform.freedesktop_os_release()
    except (OSError, AttributeError):
        return {}


class HostSampler:
    """Reads CPU, memory, disk, network and system counters via psutil."""

    def __init__(self) -> None:
        self.cpu = CpuReading()
        self.memory = MemoryReading()
        self.swap = SwapReading()
        self.disks: list[DiskReading] = []
        self.networks: list[NetworkReading] = []
        # prime cpu_percent so the first refresh reports a real interval
        psutil.cpu_percent(interval=None)
        psutil.cpu_percent(interval=None, percpu=True)

    def refresh(self) -> None:
        """Refresh CPU, memory, disk and network readings in place."""
        self.cpu = self._read_cpu()
        self.memory, self.swap = self._read_memory()
        self.disks = self._read_disks()
        self.networks = self._read_networks()

    def hostname(self) -> str | None:
        try:
            return socket.gethostname() or None
        except OSError:
            return None

    def system(self) -> SystemReading:
        """Read uptime, load and OS identity; not part of :meth:`refresh`."""
        boot_time = psutil.boot_time()
        try:
            load_1, load_5, load_15 = psutil.getloadavg()
        except (OSError, AttributeError):
            load_1 = load_5 = load_15 = 0.0

        release = _os_release()
        system_name = platform.system()
        if system_name == "Darwin":
            os_version = platform.mac_ver()[0]
        elif system_name == "Windows":
            os_version = platform.version()
        else:
            os_version = release.get("VERSION_ID")

        return SystemReading(
            uptime=max(0.0, time.time() - boot_time),
            boot_time=boot_time,
            load_1=load_1,
            load_5=load_5,
            load_15=load_15,
            os_name=release.get("NAME") or system_name or None,
            os_version=os_version or None,
            kernel_version=platform.release() or None,
            arch=platform.machine() or None,
        )

    def _read_cpu(self) -> CpuReading:
        return CpuReading(
            usage=psutil.cpu_percent(interval=None),
            per_core=tuple(psutil.cpu_percent(interval=None, percpu=True)),
            count=psutil.cpu_count(logical=True) or 0,
        )

    def _read_memory(self) -> tuple[MemoryReading, SwapReading]:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return (
            MemoryReading(total=mem.total, used=mem.used, free=mem.free, available=mem.available),
            SwapReading(total=swap.total, used=swap.used, free=swap.free),
        )

    def _read_disks(self) -> list[DiskReading]:
        disks: list[DiskReading] = []
        for part in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as exc:
                logger.debug("Skipping %s: %s", part.mountpoint, exc)
                continue
            disks.append(DiskReading(
                mount_point=part.mountpoint,
                device=part.device or None,
                fs_type=part.fstype or None,
                total=usage.total,
                available=usage.free,
                removable=is_removable(part.device, part.opts),
            ))
        return disks

    def _read_networks(self) -> list[NetworkReading]:
        counters = psutil.net_io_counters(pernic=True)
        return [
            NetworkReading(
                interface=iface,
                bytes_received=nio.bytes_recv,
                bytes_transmitted=nio.bytes_sent,
                packets_received=nio.packets_recv,
                packets_transmitted=nio.packets_sent,
                receive_errors=nio.errin,
                transmit_errors=nio.errout,
            )
            for iface, nio in sorted(counters.items())
        ]

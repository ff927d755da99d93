"""Shared fakes for the agemon tests."""

from agemon.collector.sampler import (
    CpuReading,
    DiskReading,
    MemoryReading,
    NetworkReading,
    SwapReading,
    SystemReading,
)


class FakeSampler:
    """Serves fixed readings in place of psutil."""

    def __init__(
        self,
        cpu=None,
        memory=None,
        swap=None,
        disks=None,
        networks=None,
        system=None,
        host="test-host",
    ):
        self.cpu = cpu or CpuReading(usage=12.5, per_core=(10.0, 15.0), count=2)
        self.memory = memory or MemoryReading(total=1000, used=250, free=500, available=750)
        self.swap = swap or SwapReading(total=0, used=0, free=0)
        self.disks = disks if disks is not None else [
            DiskReading("/", "/dev/sda1", "ext4", total=500, available=200, removable=False),
        ]
        self.networks = networks if networks is not None else [
            NetworkReading("eth0", 100, 200, 3, 4, 0, 1),
        ]
        self.system_reading = system or SystemReading(
            uptime=3600.0,
            boot_time=1_700_000_000.0,
            load_1=0.5,
            load_5=0.25,
            load_15=0.125,
            os_name="Linux",
            os_version="6.1",
            kernel_version="6.1.0",
            arch="x86_64",
        )
        self.host = host
        self.refreshes = 0

    def refresh(self):
        self.refreshes += 1

    def hostname(self):
        return self.host

    def system(self):
        return self.system_reading

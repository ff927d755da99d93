"""Tests for the label builder, sampler and metric collectors."""

import math

import pytest

from agemon.collector.base import (
    CycleSnapshot,
    Label,
    build_labels,
    label_text,
    make_series,
    or_unknown,
    series_to_dicts,
    usage_ratio,
)
from agemon.collector.cpu import CpuCollector
from agemon.collector.disk import DiskCollector
from agemon.collector.memory import MemoryCollector
from agemon.collector.network import NetworkCollector
from agemon.collector.sampler import (
    DiskReading,
    HostSampler,
    MemoryReading,
    SwapReading,
    SystemReading,
    is_removable,
)
from agemon.collector.system import SystemCollector

from conftest import FakeSampler

SNAPSHOT = CycleSnapshot(hostname="test-host", timestamp=1_700_000_000_123)


def _by_name(series, name):
    return [s for s in series if s.name == name]


def _value(series, name):
    matches = _by_name(series, name)
    assert len(matches) == 1, name
    return matches[0].samples[0].value


# ---------------------------------------------------------------------------
# Label builder
# ---------------------------------------------------------------------------

def test_build_labels_order():
    labels = build_labels("agemon_cpu_count", "host-a", [("cpu", "0")])
    assert labels == [
        Label("__name__", "agemon_cpu_count"),
        Label("hostname", "host-a"),
        Label("cpu", "0"),
    ]


def test_build_labels_rejects_duplicates():
    with pytest.raises(ValueError):
        build_labels("agemon_x", "host-a", [("hostname", "other")])
    with pytest.raises(ValueError):
        build_labels("agemon_x", "host-a", [("cpu", "0"), ("cpu", "1")])


def test_build_labels_requires_prefix():
    with pytest.raises(ValueError):
        build_labels("node_cpu_seconds_total", "host-a")


def test_make_series_uses_snapshot():
    series = make_series("agemon_cpu_count", 8, SNAPSHOT)
    assert series.name == "agemon_cpu_count"
    assert series.label("hostname") == "test-host"
    assert series.label("missing") is None
    assert len(series.samples) == 1
    assert series.samples[0].value == 8.0
    assert isinstance(series.samples[0].value, float)
    assert series.samples[0].timestamp == SNAPSHOT.timestamp


def test_or_unknown():
    assert or_unknown(None) == "unknown"
    assert or_unknown("") == "unknown"
    assert or_unknown("ext4") == "ext4"


def test_usage_ratio_zero_total():
    assert usage_ratio(0, 0) == 0.0
    assert usage_ratio(10, 0) == 0.0
    assert usage_ratio(1, 4) == 0.25


def test_series_to_dicts():
    dicts = series_to_dicts([make_series("agemon_cpu_count", 2, SNAPSHOT, [("cpu", "0")])])
    assert dicts == [{
        "name": "agemon_cpu_count",
        "labels": {"hostname": "test-host", "cpu": "0"},
        "value": 2.0,
        "timestamp": SNAPSHOT.timestamp,
    }]


# ---------------------------------------------------------------------------
# Collectors
# ---------------------------------------------------------------------------

def test_cpu_collector():
    collector = CpuCollector()
    assert collector.name == "cpu"
    series = collector.collect(FakeSampler(), SNAPSHOT)

    assert _value(series, "agemon_cpu_usage_percent") == 12.5
    assert _value(series, "agemon_cpu_count") == 2.0
    cores = _by_name(series, "agemon_cpu_core_usage_percent")
    assert [s.label("cpu") for s in cores] == ["0", "1"]
    assert [s.samples[0].value for s in cores] == [10.0, 15.0]


def test_memory_collector_usage_ratio():
    sampler = FakeSampler(memory=MemoryReading(total=1000, used=250, free=500, available=750))
    series = MemoryCollector().collect(sampler, SNAPSHOT)

    assert _value(series, "agemon_memory_usage_ratio") == 0.25
    assert _value(series, "agemon_memory_total_bytes") == 1000.0
    assert _value(series, "agemon_memory_used_bytes") == 250.0
    assert _value(series, "agemon_memory_free_bytes") == 500.0
    assert _value(series, "agemon_memory_available_bytes") == 750.0


def test_memory_collector_without_swap():
    sampler = FakeSampler(
        memory=MemoryReading(total=0, used=0, free=0, available=0),
        swap=SwapReading(total=0, used=0, free=0),
    )
    series = MemoryCollector().collect(sampler, SNAPSHOT)

    for name in ("agemon_memory_usage_ratio", "agemon_swap_usage_ratio"):
        value = _value(series, name)
        assert value == 0.0
        assert not math.isnan(value) and not math.isinf(value)


def test_memory_collector_swap_ratio():
    sampler = FakeSampler(swap=SwapReading(total=400, used=100, free=300))
    series = MemoryCollector().collect(sampler, SNAPSHOT)
    assert _value(series, "agemon_swap_usage_ratio") == 0.25
    assert _value(series, "agemon_swap_free_bytes") == 300.0


def test_disk_collector():
    sampler = FakeSampler(disks=[
        DiskReading("/", "/dev/sda1", "ext4", total=500, available=200, removable=False),
        DiskReading("/media/usb", "/dev/sdb1", "vfat", total=100, available=100, removable=True),
    ])
    series = DiskCollector().collect(sampler, SNAPSHOT)
    assert len(series) == 10

    root = [s for s in series if s.label("mount_point") == "/"]
    assert _value(root, "agemon_disk_used_bytes") == 300.0
    assert _value(root, "agemon_disk_usage_ratio") == 0.6
    assert _value(root, "agemon_disk_removable") == 0.0
    assert all(s.label("device") == "/dev/sda1" and s.label("fs_type") == "ext4" for s in root)

    usb = [s for s in series if s.label("mount_point") == "/media/usb"]
    assert _value(usb, "agemon_disk_removable") == 1.0
    assert _value(usb, "agemon_disk_used_bytes") == 0.0


def test_disk_collector_corrupt_reading():
    sampler = FakeSampler(disks=[DiskReading("/", "/dev/sda1", "ext4", total=500, available=700)])
    series = DiskCollector().collect(sampler, SNAPSHOT)
    assert _value(series, "agemon_disk_used_bytes") == 0.0
    assert _value(series, "agemon_disk_usage_ratio") == 0.0


def test_disk_collector_zero_total_and_missing_metadata():
    sampler = FakeSampler(disks=[DiskReading("/proc/x", None, None, total=0, available=0)])
    series = DiskCollector().collect(sampler, SNAPSHOT)
    assert _value(series, "agemon_disk_usage_ratio") == 0.0
    assert all(s.label("device") == "unknown" and s.label("fs_type") == "unknown" for s in series)


def test_network_collector():
    series = NetworkCollector().collect(FakeSampler(), SNAPSHOT)
    assert len(series) == 6
    assert all(s.label("interface") == "eth0" for s in series)
    assert all(s.name.endswith("_total") for s in series)
    assert _value(series, "agemon_network_received_bytes_total") == 100.0
    assert _value(series, "agemon_network_transmitted_bytes_total") == 200.0
    assert _value(series, "agemon_network_received_packets_total") == 3.0
    assert _value(series, "agemon_network_transmitted_packets_total") == 4.0
    assert _value(series, "agemon_network_receive_errors_total") == 0.0
    assert _value(series, "agemon_network_transmit_errors_total") == 1.0


def test_system_collector_info_metric():
    series = SystemCollector().collect(FakeSampler(), SNAPSHOT)
    info = _by_name(series, "agemon_info")
    assert len(info) == 1
    assert info[0].samples[0].value == 1.0
    assert info[0].label("os_name") == "Linux"
    assert info[0].label("arch") == "x86_64"
    assert _value(series, "agemon_system_uptime_seconds") == 3600.0
    assert _value(series, "agemon_system_load_average_15m") == 0.125


def test_system_collector_unknown_strings():
    sampler = FakeSampler(system=SystemReading())
    info = _by_name(SystemCollector().collect(sampler, SNAPSHOT), "agemon_info")[0]
    for key in ("os_name", "os_version", "kernel_version", "arch"):
        assert info.label(key) == "unknown"


def test_collectors_do_not_touch_sampler():
    sampler = FakeSampler()
    for collector in (CpuCollector(), MemoryCollector(), DiskCollector(), NetworkCollector(), SystemCollector()):
        collector.collect(sampler, SNAPSHOT)
    assert sampler.refreshes == 0


def test_collector_to_dict():
    collector = CpuCollector()
    dicts = collector.to_dict(collector.collect(FakeSampler(), SNAPSHOT))
    assert all(isinstance(d, dict) for d in dicts)
    assert all("name" in d and "value" in d for d in dicts)


# ---------------------------------------------------------------------------
# psutil sampler
# ---------------------------------------------------------------------------

def test_host_sampler_refresh():
    sampler = HostSampler()
    sampler.refresh()
    assert sampler.cpu.count > 0
    assert 0 <= sampler.cpu.usage <= 100
    assert sampler.memory.total > 0
    assert all(d.total >= 0 for d in sampler.disks)
    names = [n.interface for n in sampler.networks]
    assert names == sorted(names)


def test_host_sampler_system():
    info = HostSampler().system()
    assert info.boot_time > 0
    assert info.uptime >= 0
    assert info.load_1 >= 0


def test_is_removable_from_mount_options():
    assert is_removable("E:\\", "rw,removable") is True
    assert is_removable(None, "rw") is False
    assert is_removable("tmpfs", "rw") is False


def test_is_removable_from_sysfs(tmp_path):
    disk = tmp_path / "devices" / "sdz"
    part = disk / "sdz1"
    part.mkdir(parents=True)
    (disk / "removable").write_text("1\n")
    block = tmp_path / "block"
    block.mkdir()
    (block / "sdz1").symlink_to(part)
    (block / "sdz").symlink_to(disk)

    assert is_removable("/dev/sdz1", "rw", sys_block=block) is True
    assert is_removable("/dev/sdz", "rw", sys_block=block) is True
    assert is_removable("/dev/sdy1", "rw", sys_block=block) is False


def test_label_text_replaces_undecodable_bytes():
    assert label_text("/mnt/caf\udce9") == "/mnt/caf\ufffd"
    assert label_text("/mnt/café") == "/mnt/café"
    assert "\ud800" not in label_text("eth\ud800")


def test_disk_labels_with_undecodable_bytes_are_valid_utf8():
    sampler = FakeSampler(disks=[
        DiskReading("/mnt/caf\udce9", "/dev/sd\udcff1", "ext4", total=500, available=200),
    ])
    series = DiskCollector().collect(sampler, SNAPSHOT)
    assert {s.label("mount_point") for s in series} == {"/mnt/caf\ufffd"}
    assert {s.label("device") for s in series} == {"/dev/sd\ufffd1"}
    for s in series:
        for lbl in s.labels:
            lbl.value.encode("utf-8")

"""Shared test fixtures for sar-pcp."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from sar_pcp.records import DUPLEX_FULL, CpuStats, NetDevStats, NetEdevStats, SerialStats
from sar_pcp.sink import ListSink


@pytest.fixture
def sink() -> ListSink:
    """Create an empty in-memory sink."""
    return ListSink()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog and stdlib logging after tests that configure logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp dir so config and log paths never touch the real one."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


def make_cpu(
    user: int = 0,
    nice: int = 0,
    sys: int = 0,
    idle: int = 0,
    iowait: int = 0,
    steal: int = 0,
    hardirq: int = 0,
    softirq: int = 0,
    guest: int = 0,
    guest_nice: int = 0,
) -> CpuStats:
    """Create a CpuStats record; unspecified tick counters are zero."""
    return CpuStats(
        user=user,
        nice=nice,
        sys=sys,
        idle=idle,
        iowait=iowait,
        steal=steal,
        hardirq=hardirq,
        softirq=softirq,
        guest=guest,
        guest_nice=guest_nice,
    )


def make_net_dev(
    interface: str = "eth0",
    rx_packets: int = 0,
    tx_packets: int = 0,
    rx_bytes: int = 0,
    tx_bytes: int = 0,
    rx_compressed: int = 0,
    tx_compressed: int = 0,
    multicast: int = 0,
    speed: int = 0,
    duplex: int = DUPLEX_FULL,
) -> NetDevStats:
    """Create a NetDevStats record for testing."""
    return NetDevStats(
        interface=interface,
        rx_packets=rx_packets,
        tx_packets=tx_packets,
        rx_bytes=rx_bytes,
        tx_bytes=tx_bytes,
        rx_compressed=rx_compressed,
        tx_compressed=tx_compressed,
        multicast=multicast,
        speed=speed,
        duplex=duplex,
    )


def make_net_edev(interface: str = "eth0", **counters: int) -> NetEdevStats:
    """Create a NetEdevStats record; counters are passed by field name."""
    return NetEdevStats(interface=interface, **counters)


def make_serial(line: int, **counters: int) -> SerialStats:
    """Create a SerialStats record for a line."""
    return SerialStats(line=line, **counters)


def write_sample(path: Path, uptime_cs: int, activities: dict, nr_cpu: int | None = None) -> Path:
    """Write a JSON sample file and return its path."""
    data: dict = {"uptime_cs": uptime_cs, "activities": activities}
    if nr_cpu is not None:
        data["nr_cpu"] = nr_cpu
    path.write_text(json.dumps(data))
    return path

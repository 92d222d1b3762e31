from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from storage.onewire import DeviceDiscoveryError, OneWireBus, build_default_bus


def _make_devices(root: Path, *names: str) -> None:
    for name in names:
        (root / name).mkdir(parents=True)


def test_list_devices_skips_bus_master(tmp_path: Path) -> None:
    _make_devices(tmp_path, "28-000001", "28-000002", "w1_bus_master1")
    bus = OneWireBus(root_path=tmp_path)

    devices = bus.list_devices()

    expected = [name for name in os.listdir(tmp_path) if name != "w1_bus_master1"]
    assert devices == expected
    assert sorted(devices) == ["28-000001", "28-000002"]


def test_list_devices_skips_every_bus_master(tmp_path: Path) -> None:
    _make_devices(tmp_path, "28-000001", "w1_bus_master1", "w1_bus_master2")
    bus = OneWireBus(root_path=tmp_path)

    assert bus.list_devices() == ["28-000001"]


def test_list_devices_empty_directory(tmp_path: Path) -> None:
    assert OneWireBus(root_path=tmp_path).list_devices() == []


def test_list_devices_logs_each_device(tmp_path: Path, caplog) -> None:
    _make_devices(tmp_path, "28-000001")
    bus = OneWireBus(root_path=tmp_path)

    with caplog.at_level(logging.INFO, logger="storage.onewire"):
        bus.list_devices()

    assert any(getattr(record, "device_id", None) == "28-000001" for record in caplog.records)


def test_missing_root_raises_discovery_error(tmp_path: Path, caplog) -> None:
    bus = OneWireBus(root_path=tmp_path / "missing")

    with caplog.at_level(logging.CRITICAL, logger="storage.onewire"):
        with pytest.raises(DeviceDiscoveryError) as excinfo:
            bus.list_devices()

    assert "missing" in str(excinfo.value)
    assert any(record.levelno == logging.CRITICAL for record in caplog.records)


def test_read_payload_uses_w1_slave_file(tmp_path: Path) -> None:
    _make_devices(tmp_path, "28-000001")
    (tmp_path / "28-000001" / "w1_slave").write_text("crc=57 YES\nt=21500\n")
    bus = OneWireBus(root_path=tmp_path)

    assert bus.payload_path("28-000001") == tmp_path / "28-000001" / "w1_slave"
    assert bus.read_payload("28-000001") == "crc=57 YES\nt=21500\n"


def test_read_payload_missing_file_raises_os_error(tmp_path: Path) -> None:
    bus = OneWireBus(root_path=tmp_path)

    with pytest.raises(OSError):
        bus.read_payload("28-404")


def test_build_default_bus_honours_explicit_root(tmp_path: Path) -> None:
    try:
        bus = build_default_bus(str(tmp_path))
        assert bus.root_path == tmp_path
    finally:
        build_default_bus.cache_clear()

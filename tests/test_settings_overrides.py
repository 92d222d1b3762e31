from __future__ import annotations

import socket
from typing import Iterable

import pytest

from services.poller import build_default_poller
from settings import get_settings, parse_listen_address
from storage.onewire import build_default_bus

_ENV_NAMES = (
    "ONEWIRE_LISTEN_ADDRESS",
    "ONEWIRE_TELEMETRY_PATH",
    "ONEWIRE_JSON_PATH",
    "ONEWIRE_EXPORT_FAHRENHEIT",
    "ONEWIRE_DEVICE_ROOT",
    "ONEWIRE_POLL_INTERVAL",
    "ONEWIRE_READ_ATTEMPTS",
    "ONEWIRE_RETRY_DELAY",
    "LOG_LEVEL",
)


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults() -> None:
    settings = get_settings()

    assert settings.listen_address == ":8105"
    assert settings.telemetry_path == "/metrics"
    assert settings.json_path == "/json"
    assert settings.export_fahrenheit is False
    assert settings.device_root == "/sys/bus/w1/devices"
    assert settings.poll_interval == 60.0
    assert settings.read_attempts == 5
    assert settings.retry_delay == 1.0
    assert settings.log_level == "INFO"
    assert settings.hostname == socket.gethostname()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("ONEWIRE_LISTEN_ADDRESS", "127.0.0.1:9000")
    monkeypatch.setenv("ONEWIRE_TELEMETRY_PATH", "/prom")
    monkeypatch.setenv("ONEWIRE_JSON_PATH", "sensors")
    monkeypatch.setenv("ONEWIRE_EXPORT_FAHRENHEIT", "yes")
    monkeypatch.setenv("ONEWIRE_DEVICE_ROOT", str(tmp_path))
    monkeypatch.setenv("ONEWIRE_POLL_INTERVAL", "15")
    monkeypatch.setenv("ONEWIRE_READ_ATTEMPTS", "3")
    monkeypatch.setenv("ONEWIRE_RETRY_DELAY", "0.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    caches = (get_settings, build_default_bus, build_default_poller)
    _clear_caches(caches)

    settings = get_settings()
    poller = build_default_poller()
    try:
        assert settings.listen_address == "127.0.0.1:9000"
        assert settings.telemetry_path == "/prom"
        assert settings.json_path == "/sensors"
        assert settings.export_fahrenheit is True
        assert settings.log_level == "DEBUG"
        assert poller.bus.root_path == tmp_path
        assert poller.interval == 15.0
        assert poller.reader.max_attempts == 3
        assert poller.reader.retry_delay == 0.5
        assert poller.metrics.export_fahrenheit is True
    finally:
        poller.shutdown()
        _clear_caches(caches)


@pytest.mark.parametrize(
    "name, value",
    [
        ("ONEWIRE_POLL_INTERVAL", "soon"),
        ("ONEWIRE_POLL_INTERVAL", "-5"),
        ("ONEWIRE_READ_ATTEMPTS", "0"),
        ("ONEWIRE_EXPORT_FAHRENHEIT", "maybe"),
        ("ONEWIRE_LISTEN_ADDRESS", "   "),
    ],
)
def test_invalid_values_fall_back_to_defaults(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    settings = get_settings()

    assert settings.poll_interval == 60.0
    assert settings.read_attempts == 5
    assert settings.export_fahrenheit is False
    assert settings.listen_address == ":8105"


@pytest.mark.parametrize(
    "address, expected",
    [
        (":8105", ("0.0.0.0", 8105)),
        ("127.0.0.1:9000", ("127.0.0.1", 9000)),
        ("localhost:80", ("localhost", 80)),
        ("[::1]:8105", ("::1", 8105)),
    ],
)
def test_parse_listen_address(address: str, expected: tuple) -> None:
    assert parse_listen_address(address) == expected


@pytest.mark.parametrize("address", ["8105", "host:", "host:abc", ":70000"])
def test_parse_listen_address_rejects_malformed(address: str) -> None:
    with pytest.raises(ValueError):
        parse_listen_address(address)

from __future__ import annotations

import os
import socket
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_LISTEN_ADDRESS_ENV = "ONEWIRE_LISTEN_ADDRESS"
_TELEMETRY_PATH_ENV = "ONEWIRE_TELEMETRY_PATH"
_JSON_PATH_ENV = "ONEWIRE_JSON_PATH"
_FAHRENHEIT_ENV = "ONEWIRE_EXPORT_FAHRENHEIT"
_DEVICE_ROOT_ENV = "ONEWIRE_DEVICE_ROOT"
_POLL_INTERVAL_ENV = "ONEWIRE_POLL_INTERVAL"
_READ_ATTEMPTS_ENV = "ONEWIRE_READ_ATTEMPTS"
_RETRY_DELAY_ENV = "ONEWIRE_RETRY_DELAY"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_DEVICE_ROOT = "/sys/bus/w1/devices"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    listen_address: str
    telemetry_path: str
    json_path: str
    export_fahrenheit: bool
    device_root: str
    poll_interval: float
    read_attempts: int
    retry_delay: float
    log_level: str
    hostname: str


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split a ``host:port`` bind address; an empty host binds all interfaces."""
    candidate = address.strip()
    host, sep, port_raw = candidate.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address {address!r} must be of the form host:port.")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ValueError(f"Listen address {address!r} has an invalid port.") from exc
    if not 0 < port < 65536:
        raise ValueError(f"Listen address {address!r} has an out of range port.")
    return host or "0.0.0.0", port


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_path_env(name: str, default: str) -> str:
    candidate = _read_str_env(name, default)
    if not candidate.startswith("/"):
        candidate = f"/{candidate}"
    return candidate


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        listen_address=_read_str_env(_LISTEN_ADDRESS_ENV, ":8105"),
        telemetry_path=_read_path_env(_TELEMETRY_PATH_ENV, "/metrics"),
        json_path=_read_path_env(_JSON_PATH_ENV, "/json"),
        export_fahrenheit=_read_bool_env(_FAHRENHEIT_ENV, False),
        device_root=_read_str_env(_DEVICE_ROOT_ENV, DEFAULT_DEVICE_ROOT),
        poll_interval=_read_positive_float(_POLL_INTERVAL_ENV, 60.0),
        read_attempts=_read_positive_int(_READ_ATTEMPTS_ENV, 5),
        retry_delay=_read_positive_float(_RETRY_DELAY_ENV, 1.0),
        log_level=_read_log_level("INFO"),
        hostname=socket.gethostname(),
    )

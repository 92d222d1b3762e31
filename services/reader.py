"""Bounded-retry payload reads for a single sensor."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from services.parser import PayloadParseError, parse_payload
from storage.onewire import OneWireBus

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY = 1.0


class DeviceReadError(Exception):
    """Raised when no reading could be obtained from a device."""


class PayloadReadError(DeviceReadError):
    """Raised when the payload file itself could not be read."""


class ReadState(str, Enum):
    """States of a single device read."""

    reading = "reading"
    retrying = "retrying"
    succeeded = "succeeded"
    failed = "failed"


@dataclass
class ReadOutcome:
    device_id: str
    state: ReadState
    attempts: int
    value: Optional[float] = None
    error: Optional[DeviceReadError] = None


class DeviceReader:
    """Reads and parses one device's payload.

    I/O errors fail immediately. Parse failures are retried after a fixed
    pause until ``max_attempts`` reads have been made.
    """

    def __init__(
        self,
        bus: OneWireBus,
        hostname: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.bus = bus
        self.hostname = hostname
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    def read(self, device_id: str) -> float:
        """Return degrees Celsius or raise ``DeviceReadError``."""
        outcome = self.attempt(device_id)
        if outcome.state is ReadState.failed:
            assert outcome.error is not None
            raise outcome.error
        assert outcome.value is not None
        return outcome.value

    def attempt(self, device_id: str) -> ReadOutcome:
        payload_file = str(self.bus.payload_path(device_id))
        state = ReadState.reading
        attempts = 0

        while True:
            if state is ReadState.retrying:
                self._sleep(self.retry_delay)
                state = ReadState.reading

            attempts += 1
            try:
                text = self.bus.read_payload(device_id)
            except OSError as exc:
                logger.error(
                    "Error reading Device",
                    extra={"device_id": device_id, "payload_file": payload_file, "reason": str(exc)},
                )
                error = PayloadReadError(f"Error reading device {device_id!r}: {exc}")
                return ReadOutcome(device_id, ReadState.failed, attempts, error=error)

            try:
                value = parse_payload(text)
            except PayloadParseError:
                if attempts >= self.max_attempts:
                    error = DeviceReadError(
                        f"Failed to read device {device_id!r} after {attempts} attempts."
                    )
                    return ReadOutcome(device_id, ReadState.failed, attempts, error=error)
                logger.warning(
                    "Retrying read",
                    extra={
                        "device_id": device_id,
                        "payload_file": payload_file,
                        "hostname": self.hostname,
                        "attempt": attempts,
                    },
                )
                state = ReadState.retrying
                continue

            return ReadOutcome(device_id, ReadState.succeeded, attempts, value=value)

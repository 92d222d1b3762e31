"""Payload parsing and unit conversion for 1-Wire temperature sensors."""

from __future__ import annotations

import math
import re

_PAYLOAD_PATTERN = re.compile(r".*YES.*t=(-?[0-9]+)", re.DOTALL)


class PayloadParseError(ValueError):
    """Raised when a payload lacks the validity marker or temperature field."""


def parse_payload(text: str) -> float:
    """Return degrees Celsius from a ``w1_slave`` payload.

    The payload must contain the ``YES`` CRC marker followed, anywhere later,
    by ``t=<millidegrees>``.
    """
    match = _PAYLOAD_PATTERN.search(text)
    if match is None:
        raise PayloadParseError("Payload has no valid temperature reading.")
    return int(match.group(1)) / 1000


def round_half_away(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with ties away from zero."""
    scale = 10**digits
    scaled = value * scale
    whole = math.trunc(scaled)
    if abs(scaled - whole) >= 0.5:
        whole += int(math.copysign(1, scaled))
    return whole / scale


def celsius_to_fahrenheit(celsius: float) -> float:
    return round_half_away(celsius * 1.8 + 32, 2)

"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass

TEMPERATURE = "temperature"


@dataclass(frozen=True, slots=True)
class SensorReading:
    """The latest value read from one sensor, in degrees Celsius."""

    sensor_id: str
    value: float
    sensor_type: str = TEMPERATURE

"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from pydantic import BaseModel, Field

from models.records import SensorReading


class SensorSnapshotItem(BaseModel):
    """One sensor's latest reading as served by the JSON endpoint."""

    sensorid: str = Field(..., description="Device identifier under the device root.")
    type: str = Field(..., description="Sensor kind, currently always 'temperature'.")
    value: float = Field(..., description="Latest value in degrees Celsius.")

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "SensorSnapshotItem":
        return cls(sensorid=reading.sensor_id, type=reading.sensor_type, value=reading.value)


class HealthResponse(BaseModel):
    status: str = "ok"
    devices: int = Field(..., ge=0)

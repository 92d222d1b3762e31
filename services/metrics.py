"""Prometheus gauges for sensor temperatures."""

from __future__ import annotations

from typing import Optional, Tuple

from prometheus_client import CollectorRegistry, Gauge, generate_latest
from prometheus_client.exposition import choose_encoder

from services.parser import celsius_to_fahrenheit

_LABELS = ("device_id", "hostname")


class TemperatureMetrics:
    """Gauge state keyed by device and host, with an optional Fahrenheit twin."""

    def __init__(
        self,
        hostname: str,
        export_fahrenheit: bool = False,
        registry: Optional[CollectorRegistry] = None,
    ) -> None:
        self.hostname = hostname
        self.registry = registry if registry is not None else CollectorRegistry()
        self.celsius = Gauge(
            "onewire_temperature_c",
            "Onewire Temperature Sensor Value in Celsius.",
            _LABELS,
            registry=self.registry,
        )
        self.fahrenheit: Optional[Gauge] = None
        if export_fahrenheit:
            self.fahrenheit = Gauge(
                "onewire_temperature_f",
                "Onewire Temperature Sensor Value in Fahrenheit.",
                _LABELS,
                registry=self.registry,
            )

    @property
    def export_fahrenheit(self) -> bool:
        return self.fahrenheit is not None

    def observe(self, device_id: str, celsius: float) -> Optional[float]:
        """Set the gauges for ``device_id``; return Fahrenheit when exported."""
        self.celsius.labels(device_id=device_id, hostname=self.hostname).set(celsius)
        if self.fahrenheit is None:
            return None
        fahrenheit = celsius_to_fahrenheit(celsius)
        self.fahrenheit.labels(device_id=device_id, hostname=self.hostname).set(fahrenheit)
        return fahrenheit

    def render(self) -> bytes:
        return generate_latest(self.registry)

    def negotiate(self, accept: Optional[str]) -> Tuple[bytes, str]:
        """Encode for the scraper's Accept header: OpenMetrics or classic text."""
        encoder, content_type = choose_encoder(accept or "")
        return encoder(self.registry), content_type

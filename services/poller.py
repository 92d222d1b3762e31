"""Background polling of every discovered sensor."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from threading import Event
from typing import Optional, Tuple

from prometheus_client import PlatformCollector, ProcessCollector

from datastore.snapshot_store import SnapshotStore
from models.records import SensorReading
from services.metrics import TemperatureMetrics
from services.reader import DeviceReader, DeviceReadError
from settings import get_settings
from storage.onewire import OneWireBus, build_default_bus

logger = logging.getLogger(__name__)


class PollerService:
    """Discovers devices once, then refreshes gauges and the snapshot each pass."""

    def __init__(
        self,
        bus: OneWireBus,
        reader: DeviceReader,
        store: SnapshotStore,
        metrics: TemperatureMetrics,
        interval: float = 60.0,
    ) -> None:
        self.bus = bus
        self.reader = reader
        self.store = store
        self.metrics = metrics
        self.interval = interval
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="onewire-poller")
        self._stop = Event()
        self._future: Optional[Future[None]] = None
        self._discovered = False

    @property
    def hostname(self) -> str:
        return self.metrics.hostname

    def discover(self) -> Tuple[str, ...]:
        """List devices and size the snapshot; ``DeviceDiscoveryError`` is fatal."""
        device_ids = self.bus.list_devices()
        self.store.initialize(device_ids)
        self._discovered = True
        logger.info(
            "Device discovery complete",
            extra={"device_root": str(self.bus.root_path), "device_count": len(device_ids)},
        )
        return self.store.device_ids

    def start(self) -> None:
        if self._future is not None:
            return
        if not self._discovered:
            self.discover()
        self._future = self.executor.submit(self._run_loop)

    def shutdown(self) -> None:
        """Stop the loop after the current pass and release the executor."""
        self._stop.set()
        self.executor.shutdown(wait=False, cancel_futures=True)

    def run_pass(self) -> Tuple[SensorReading, ...]:
        buffer = self.store.begin_pass()
        for index, device_id in enumerate(self.store.device_ids):
            try:
                value = self.reader.read(device_id)
            except DeviceReadError as exc:
                logger.error(
                    "Error reading from device",
                    extra={"device_id": device_id, "reason": str(exc)},
                )
                continue

            fahrenheit = self.metrics.observe(device_id, value)
            logger.info(
                "Value read from device",
                extra={
                    "device_id": device_id,
                    "value": value,
                    "fahrenheit": fahrenheit,
                    "hostname": self.hostname,
                },
            )
            buffer[index] = SensorReading(sensor_id=device_id, value=value)

        self.store.publish(buffer)
        return self.store.read()

    def _run_loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_pass()
            except Exception:
                logger.exception("Polling pass failed")
            self._stop.wait(self.interval)


@lru_cache
def build_default_poller() -> PollerService:
    """Factory that wires the poller from environment settings."""
    settings = get_settings()
    bus = build_default_bus()
    reader = DeviceReader(
        bus=bus,
        hostname=settings.hostname,
        max_attempts=settings.read_attempts,
        retry_delay=settings.retry_delay,
    )
    metrics = TemperatureMetrics(
        hostname=settings.hostname,
        export_fahrenheit=settings.export_fahrenheit,
    )
    ProcessCollector(registry=metrics.registry)
    PlatformCollector(registry=metrics.registry)
    return PollerService(
        bus=bus,
        reader=reader,
        store=SnapshotStore(),
        metrics=metrics,
        interval=settings.poll_interval,
    )

from __future__ import annotations

from threading import Lock
from typing import Iterable, List, Sequence, Tuple

from models.records import SensorReading


class SnapshotStore:
    """Latest pass-consistent readings, replaced wholesale by the poller.

    Readers only dereference ``_snapshot``; writers build a private buffer
    and swap a new tuple in, so a reader sees one complete pass.
    """

    def __init__(self) -> None:
        self._device_ids: Tuple[str, ...] = ()
        self._snapshot: Tuple[SensorReading, ...] = ()
        self._lock = Lock()

    @property
    def device_ids(self) -> Tuple[str, ...]:
        return self._device_ids

    def initialize(self, device_ids: Iterable[str]) -> None:
        with self._lock:
            self._device_ids = tuple(device_ids)
            self._snapshot = tuple(
                SensorReading(sensor_id=device_id, value=0.0) for device_id in self._device_ids
            )

    def begin_pass(self) -> List[SensorReading]:
        """Return a private, mutable copy of the current snapshot."""
        return list(self._snapshot)

    def publish(self, buffer: Sequence[SensorReading]) -> None:
        snapshot = tuple(buffer)
        with self._lock:
            if len(snapshot) != len(self._device_ids):
                raise ValueError(
                    f"Snapshot has {len(snapshot)} readings, expected {len(self._device_ids)}."
                )
            self._snapshot = snapshot

    def read(self) -> Tuple[SensorReading, ...]:
        return self._snapshot

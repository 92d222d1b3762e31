from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from settings import get_settings

logger = logging.getLogger(__name__)

BUS_MASTER_MARKER = "w1_bus_master"
PAYLOAD_FILENAME = "w1_slave"


class DeviceDiscoveryError(RuntimeError):
    """Raised when the device root cannot be listed."""


class OneWireBus:

    def __init__(self, root_path: Path) -> None:
        self.root_path = root_path

    def list_devices(self) -> List[str]:
        """Return sensor identifiers in directory enumeration order."""
        try:
            entries = os.listdir(self.root_path)
        except OSError as exc:
            logger.critical(
                "Can't read device directory",
                extra={"device_root": str(self.root_path), "reason": str(exc)},
            )
            raise DeviceDiscoveryError(
                f"Can't read device directory {str(self.root_path)!r}: {exc}"
            ) from exc

        devices: List[str] = []
        for name in entries:
            if BUS_MASTER_MARKER in name:
                continue
            devices.append(name)
            logger.info("Device found", extra={"device_id": name})
        return devices

    def payload_path(self, device_id: str) -> Path:
        return self.root_path / device_id / PAYLOAD_FILENAME

    def read_payload(self, device_id: str) -> str:
        """Read the raw payload text; ``OSError`` propagates to the caller."""
        return self.payload_path(device_id).read_text(encoding="ascii", errors="replace")


@lru_cache
def build_default_bus(root_path: Optional[str] = None) -> OneWireBus:
    settings = get_settings()
    device_root = settings.device_root if root_path is None else root_path
    return OneWireBus(root_path=Path(device_root))

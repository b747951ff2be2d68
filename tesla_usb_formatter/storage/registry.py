"""Registry of enumerated devices, shared by all commands.

Maps device path -> Device for the most recent enumeration. One lock guards
the whole registry, so a refresh and a lookup never interleave.

The registry also tracks which devices have an operation in flight. A second
operation on the same device is refused; operations on different devices
may run side by side.

Usage:
    registry = DeviceRegistry()
    registry.replace_all(list_removable_devices())

    device = registry.get("/dev/sdb")
    with registry.device_operation(device.path):
        format_for_tesla(device, config)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generator, Iterable

from tesla_usb_formatter.domain.models import Device
from tesla_usb_formatter.logging import LoggerFactory

from .exceptions import DeviceBusyError, DeviceNotFoundError


log = LoggerFactory.for_usb()


class DeviceRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._devices: dict[str, Device] = {}
        self._active: set[str] = set()

    def replace_all(self, devices: Iterable[Device]) -> None:
        """Replace the registry contents with a fresh enumeration."""
        with self._lock:
            self._devices = {device.path: device for device in devices}
            log.debug(f"Registry refreshed: {len(self._devices)} device(s)")

    def get(self, path: str) -> Device:
        """
        Raises:
            DeviceNotFoundError: If ``path`` was not seen by the last enumeration
        """
        with self._lock:
            device = self._devices.get(path)
        if device is None:
            raise DeviceNotFoundError(path)
        return device

    def all(self) -> list[Device]:
        with self._lock:
            return list(self._devices.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._devices

    @contextmanager
    def device_operation(self, path: str) -> Generator[None, None, None]:
        """Mark ``path`` as busy for the duration of the block.

        Raises:
            DeviceBusyError: If another operation on ``path`` is in progress
        """
        with self._lock:
            if path in self._active:
                raise DeviceBusyError(path, "another operation is in progress")
            self._active.add(path)
            log.debug(f"Device operation started on {path}")

        try:
            yield
        finally:
            with self._lock:
                self._active.discard(path)
                log.debug(f"Device operation completed on {path}")

    def is_operation_active(self, path: str | None = None) -> bool:
        """Check whether any (or the given) device has an operation in flight."""
        with self._lock:
            if path is None:
                return bool(self._active)
            return path in self._active

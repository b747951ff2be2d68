"""Partitioning backend interface and host-platform selection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from tesla_usb_formatter.domain.models import Device, Filesystem, PartitionSpec
from tesla_usb_formatter.logging import LoggerFactory
from tesla_usb_formatter.storage.commands import (
    LINUX,
    MACOS,
    WINDOWS,
    host_platform,
)


log = LoggerFactory.for_format()


class PartitioningBackend(ABC):
    """Realizes a partition plan on a device with one platform's tools.

    Implementations wipe the device, create one partition per spec in plan
    order and format each one. They stop at the first failing tool call and
    raise ``BackendFailedError``; steps already run are not undone.
    """

    name: str = "backend"

    # Filesystem -> backend vocabulary; kinds missing here fall back to exFAT
    filesystem_names: dict[Filesystem, str] = {}

    @abstractmethod
    def apply(self, device: Device, specs: Sequence[PartitionSpec]) -> None:
        """Wipe ``device`` and lay out ``specs`` on it."""

    def filesystem_name(self, filesystem: Filesystem) -> str:
        name = self.filesystem_names.get(filesystem)
        if name is None:
            name = self.filesystem_names[Filesystem.EXFAT]
            log.warning(
                f"{self.name} cannot create {filesystem.value}; using {name} instead"
            )
        return name


def select_backend(system: Optional[str] = None) -> PartitioningBackend:
    """Instantiate the backend for the given (or current) host platform."""
    from .diskpart import DiskpartBackend
    from .diskutil import DiskutilBackend
    from .parted import PartedBackend

    platform_name = host_platform(system)
    backends = {
        WINDOWS: DiskpartBackend,
        MACOS: DiskutilBackend,
        LINUX: PartedBackend,
    }
    backend = backends[platform_name]()
    log.debug(f"Selected {backend.name} backend for {platform_name}")
    return backend


_backend: Optional[PartitioningBackend] = None


def get_backend() -> PartitioningBackend:
    """Process-wide backend, selected on first use."""
    global _backend
    if _backend is None:
        _backend = select_backend()
    return _backend

"""macOS backend built on diskutil.

Erases the whole disk to GPT under a placeholder name, then issues one
``diskutil partitionDisk`` call per planned partition.
"""

from __future__ import annotations

from typing import Sequence

from tesla_usb_formatter.domain.models import Device, Filesystem, PartitionSpec
from tesla_usb_formatter.logging import LoggerFactory
from tesla_usb_formatter.storage.commands import failure_text, run_command
from tesla_usb_formatter.storage.exceptions import BackendFailedError

from .base import PartitioningBackend


log = LoggerFactory.for_format()

PLACEHOLDER_VOLUME_NAME = "TempName"


class DiskutilBackend(PartitioningBackend):
    name = "diskutil"
    filesystem_names = {
        Filesystem.EXFAT: "ExFAT",
        Filesystem.FAT32: "MS-DOS FAT32",
        Filesystem.HFS_PLUS: "HFS+",
    }

    def apply(self, device: Device, specs: Sequence[PartitionSpec]) -> None:
        self._erase(device)
        for index, spec in enumerate(specs, start=1):
            self._create_partition(device, spec, index, len(specs))

    def _erase(self, device: Device) -> None:
        log.info(f"Erasing {device.path} to GPT")
        result = run_command(
            [
                "diskutil",
                "eraseDisk",
                self.filesystem_names[Filesystem.EXFAT],
                PLACEHOLDER_VOLUME_NAME,
                "GPT",
                device.path,
            ]
        )
        if result.returncode != 0:
            raise BackendFailedError("Erasing disk", failure_text(result))

    def _create_partition(
        self, device: Device, spec: PartitionSpec, index: int, total: int
    ) -> None:
        filesystem = self.filesystem_name(spec.filesystem)
        log.info(
            f"Creating partition {index}/{total}: {spec.name} ({spec.size_gb} GB, {filesystem})"
        )
        result = run_command(
            [
                "diskutil",
                "partitionDisk",
                device.path,
                "GPT",
                filesystem,
                spec.name,
                f"{spec.size_gb}GB",
            ]
        )
        if result.returncode != 0:
            raise BackendFailedError(
                "Creating partition", failure_text(result), partition=spec.name
            )

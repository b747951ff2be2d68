"""Linux backend built on parted and the mkfs.* tools.

Partitions of the disk that are currently mounted are unmounted first;
parted refuses to relabel a disk that is in use.

Works in two passes: first the GPT label and every partition are laid out
back to back, then each partition is formatted. Partitions are addressed by
their 1-based index, so formatting relies on the kernel having picked up the
new table in between (see ``_settle_device``).
"""

from __future__ import annotations

import contextlib
import shutil
import subprocess
from typing import Sequence

from tesla_usb_formatter.config import settings
from tesla_usb_formatter.domain.models import GIB, Device, Filesystem, PartitionSpec
from tesla_usb_formatter.logging import LoggerFactory
from tesla_usb_formatter.storage.commands import LINUX, failure_text, run_command
from tesla_usb_formatter.storage.exceptions import BackendFailedError
from tesla_usb_formatter.storage.mount import mount_points_for

from .base import PartitioningBackend


log = LoggerFactory.for_format()

SECTOR_SIZE = 512
FIRST_SECTOR = 1

# mkfs tool -> arguments placed before the label
_MKFS_COMMANDS = {
    "mkfs.exfat": ["mkfs.exfat", "-L"],
    "mkfs.fat": ["mkfs.fat", "-F", "32", "-n"],
    "mkfs.ext4": ["mkfs.ext4", "-F", "-L"],
    "mkfs.ext3": ["mkfs.ext3", "-F", "-L"],
}


def partition_sectors(specs: Sequence[PartitionSpec]) -> list[tuple[int, int]]:
    """Inclusive (start, end) sector ranges for each spec, back to back."""
    ranges = []
    start = FIRST_SECTOR
    for spec in specs:
        end = start + spec.size_gb * GIB // SECTOR_SIZE - 1
        ranges.append((start, end))
        start = end + 1
    return ranges


def partition_path(device_path: str, index: int) -> str:
    """Device node of the ``index``-th (1-based) partition.

    Kernel names get a "p" separator when the disk name ends in a digit
    (nvme0n1p1, mmcblk0p1) and none otherwise (sdb1).
    """
    separator = "p" if device_path[-1].isdigit() else ""
    return f"{device_path}{separator}{index}"


class PartedBackend(PartitioningBackend):
    name = "parted"
    filesystem_names = {
        Filesystem.EXFAT: "mkfs.exfat",
        Filesystem.FAT32: "mkfs.fat",
        Filesystem.EXT4: "mkfs.ext4",
        Filesystem.EXT3: "mkfs.ext3",
    }

    def apply(self, device: Device, specs: Sequence[PartitionSpec]) -> None:
        self._unmount_partitions(device)
        self._create_label(device)
        for spec, (start, end) in zip(specs, partition_sectors(specs)):
            self._create_partition(device, spec, start, end)
        self._settle_device(device.path)
        for index, spec in enumerate(specs, start=1):
            self._format_partition(device, spec, index)

    def _unmount_partitions(self, device: Device) -> None:
        """Unmount every mounted partition of the disk, falling back to a lazy
        unmount when the regular one fails."""
        try:
            mount_points = mount_points_for(device, system=LINUX)
        except OSError as error:
            log.debug(f"Could not read mount table for {device.path}: {error}")
            return
        for mount_point in mount_points:
            log.info(f"Unmounting {mount_point}")
            result = run_command(["umount", mount_point])
            if result.returncode == 0:
                continue
            log.debug(f"umount {mount_point} failed, trying lazy unmount")
            result = run_command(["umount", "-l", mount_point])
            if result.returncode != 0:
                raise BackendFailedError(
                    "Unmounting partitions", f"{mount_point}: {failure_text(result)}"
                )

    def _create_label(self, device: Device) -> None:
        log.info(f"Creating GPT label on {device.path}")
        result = run_command(["parted", "-s", device.path, "mklabel", "gpt"])
        if result.returncode != 0:
            raise BackendFailedError("Creating GPT label", failure_text(result))

    def _create_partition(
        self, device: Device, spec: PartitionSpec, start: int, end: int
    ) -> None:
        log.debug(f"Creating partition {spec.name}: sectors {start}-{end}")
        result = run_command(
            [
                "parted",
                "-s",
                device.path,
                "mkpart",
                "primary",
                f"{start}s",
                f"{end}s",
            ]
        )
        if result.returncode != 0:
            raise BackendFailedError(
                "Creating partition", failure_text(result), partition=spec.name
            )

    def _settle_device(self, device_path: str) -> None:
        """Ask the kernel to re-read the partition table (best effort)."""
        timeout = settings.get_int(
            "settle_timeout_seconds", settings.DEFAULT_SETTLE_TIMEOUT_SECONDS
        )
        for command in (
            ["sync"],
            ["partprobe", device_path],
            ["udevadm", "settle", f"--timeout={timeout}"],
        ):
            if not shutil.which(command[0]):
                log.debug("Skipping {}: command not found", command[0])
                continue
            with contextlib.suppress(subprocess.CalledProcessError, OSError):
                run_command(command, log_command=False)

    def _format_partition(
        self, device: Device, spec: PartitionSpec, index: int
    ) -> None:
        path = partition_path(device.path, index)
        tool = self.filesystem_name(spec.filesystem)
        command = [*_MKFS_COMMANDS[tool], spec.name, path]
        log.info(f"Formatting {path} as {spec.filesystem.value} ({spec.name})")
        try:
            result = run_command(command)
        except FileNotFoundError as error:
            raise BackendFailedError(
                "Formatting partition", f"{tool} not found: {error}", partition=spec.name
            ) from error
        if result.returncode != 0:
            raise BackendFailedError(
                "Formatting partition", failure_text(result), partition=spec.name
            )

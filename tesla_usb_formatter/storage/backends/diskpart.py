"""Windows backend built on a diskpart script.

The whole plan is serialized into one script which diskpart runs
non-interactively (``diskpart /s``). The script file only lives for the
duration of that call.
"""

from __future__ import annotations

import os
import re
import tempfile
from typing import Optional, Sequence

from tesla_usb_formatter.config import settings
from tesla_usb_formatter.domain.models import Device, Filesystem, PartitionSpec
from tesla_usb_formatter.logging import LoggerFactory
from tesla_usb_formatter.storage.commands import failure_text, run_command
from tesla_usb_formatter.storage.exceptions import (
    BackendFailedError,
    PartitionScriptError,
)

from .base import PartitioningBackend


log = LoggerFactory.for_format()

_PHYSICAL_DRIVE_RE = re.compile(r"^(?:\\\\\.\\PHYSICALDRIVE)?(\d+)$", re.IGNORECASE)
_DRIVE_LETTER_RE = re.compile(r"^([A-Za-z]):\\?$")


def available_drive_letters(count: int, candidates: Optional[str] = None) -> list[str]:
    """Pick ``count`` drive letters that are not currently in use."""
    if candidates is None:
        candidates = settings.get_setting(
            "windows_drive_letters", settings.DEFAULT_WINDOWS_DRIVE_LETTERS
        )
    letters = [
        letter
        for letter in str(candidates).upper()
        if letter.isalpha() and not os.path.exists(f"{letter}:\\")
    ]
    return letters[:count]


class DiskpartBackend(PartitioningBackend):
    name = "diskpart"
    filesystem_names = {
        Filesystem.EXFAT: "exfat",
        Filesystem.FAT32: "fat32",
        Filesystem.NTFS: "ntfs",
    }

    def __init__(self, scratch_dir: Optional[str] = None) -> None:
        self.scratch_dir = scratch_dir

    def apply(self, device: Device, specs: Sequence[PartitionSpec]) -> None:
        disk_number = self.resolve_disk_number(device.path)
        letters = available_drive_letters(len(specs))
        if len(letters) < len(specs):
            raise BackendFailedError(
                "Assigning drive letters",
                f"only {len(letters)} free drive letters for {len(specs)} partitions",
            )
        script = self.build_script(disk_number, specs, letters)
        log.debug(f"diskpart script for disk {disk_number}:\n{script}")
        self._run_script(script)

    def build_script(
        self,
        disk_number: int,
        specs: Sequence[PartitionSpec],
        letters: Sequence[str],
    ) -> str:
        """Serialize a plan into diskpart commands.

        select disk -> clean -> convert gpt, then per partition: create (size
        in MB), active, format with label, assign letter.
        """
        lines = [f"select disk {disk_number}", "clean", "convert gpt"]
        for spec, letter in zip(specs, letters):
            filesystem = self.filesystem_name(spec.filesystem)
            lines.extend(
                [
                    f"create partition primary size={spec.size_mb}",
                    "active",
                    f'format fs={filesystem} label="{spec.name}" quick',
                    f"assign letter={letter}",
                ]
            )
        lines.append("exit")
        return "\n".join(lines) + "\n"

    def resolve_disk_number(self, device_path: str) -> int:
        """Map a device path (disk number, PHYSICALDRIVE path or drive letter)
        onto the diskpart disk number."""
        match = _PHYSICAL_DRIVE_RE.match(device_path.strip())
        if match:
            return int(match.group(1))

        match = _DRIVE_LETTER_RE.match(device_path.strip())
        if not match:
            raise BackendFailedError(
                "Resolving disk number", f"unrecognised device path {device_path!r}"
            )
        result = run_command(
            [
                "powershell",
                "-NoProfile",
                "-Command",
                f"(Get-Partition -DriveLetter {match.group(1).upper()}).DiskNumber",
            ]
        )
        output = (result.stdout or "").strip()
        if result.returncode != 0 or not output.isdigit():
            raise BackendFailedError("Resolving disk number", failure_text(result))
        return int(output)

    def _run_script(self, script: str) -> None:
        fd, script_path = tempfile.mkstemp(
            prefix="diskpart_", suffix=".txt", dir=self.scratch_dir
        )
        try:
            try:
                script_file = os.fdopen(fd, "w", encoding="utf-8")
            except OSError as error:
                # fdopen did not take ownership of the descriptor
                os.close(fd)
                raise PartitionScriptError(script_path, error) from error
            try:
                with script_file:
                    script_file.write(script)
            except OSError as error:
                raise PartitionScriptError(script_path, error) from error

            result = run_command(["diskpart", "/s", script_path])
            if result.returncode != 0:
                raise BackendFailedError("Diskpart", failure_text(result))
        finally:
            try:
                os.remove(script_path)
            except FileNotFoundError:
                pass
            except OSError as error:
                log.warning(f"Could not remove diskpart script {script_path}: {error}")

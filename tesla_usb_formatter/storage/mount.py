"""Mount point discovery for freshly formatted devices.

Functions:
    - parse_mount_output(): Extract mount points for a device from `mount` output
    - mount_points_for(): Probe the live mount table once
    - wait_for_mount_points(): Poll the probe a bounded number of times

Platform behaviour:
    Windows: no probe; the device path itself (e.g. ``E:``) is the single
             guess ``E:\\``. That guess carries no Tesla marker and diskpart
             assigns new letters anyway, so no folder layout is installed on
             Windows
    macOS:   ``/dev/disk4s2 on /Volumes/TeslaCam (exfat, local, nodev)``
    Linux:   ``/dev/sdb1 on /media/pi/TeslaCam type exfat (rw,nosuid)``

Lines are matched by substring on the device path, so ``/dev/sdb`` picks up
every partition of that disk.
"""

from __future__ import annotations

import subprocess
import time
from typing import Optional

from tesla_usb_formatter.config import settings
from tesla_usb_formatter.domain.models import Device
from tesla_usb_formatter.logging import LoggerFactory

from .commands import MACOS, WINDOWS, host_platform, run_command


# Module logger
log = LoggerFactory.for_layout()


def parse_mount_output(output: str, device_path: str, system: str) -> list[str]:
    mount_points: list[str] = []
    for line in output.splitlines():
        if device_path not in line or " on " not in line:
            continue
        target = line.split(" on ", 1)[1]
        if system == MACOS:
            mount_point = target.split(" (", 1)[0]
        else:
            mount_point = target.split(" type ", 1)[0]
        mount_point = mount_point.strip()
        if mount_point:
            mount_points.append(mount_point)
    return mount_points


def mount_points_for(device: Device, system: Optional[str] = None) -> list[str]:
    """Return the mount points currently associated with ``device``.

    Raises:
        OSError: If the mount command cannot be executed
    """
    system = host_platform(system)
    if system == WINDOWS:
        # A drive root has no volume label in its path, so the layout step
        # finds no marker here and skips it
        return [device.path.rstrip("\\") + "\\"]

    result = run_command(["mount"], log_output=False, log_command=False)
    if result.returncode != 0:
        log.warning(f"mount exited with {result.returncode}: {result.stderr.strip()}")
        return []
    return parse_mount_output(result.stdout, device.path, system)


def wait_for_mount_points(
    device: Device,
    attempts: Optional[int] = None,
    interval: Optional[float] = None,
    system: Optional[str] = None,
) -> list[str]:
    """Probe until the OS has mounted at least one partition of ``device``.

    Gives up after ``attempts`` probes and returns an empty list; there is no
    error, the OS may simply not automount the device.
    """
    if attempts is None:
        attempts = settings.get_int(
            "mount_probe_attempts", settings.DEFAULT_MOUNT_PROBE_ATTEMPTS
        )
    if interval is None:
        interval = settings.get_float(
            "mount_probe_interval_seconds",
            settings.DEFAULT_MOUNT_PROBE_INTERVAL_SECONDS,
        )
    attempts = max(1, attempts)

    for attempt in range(1, attempts + 1):
        try:
            mount_points = mount_points_for(device, system=system)
        except (OSError, subprocess.SubprocessError) as error:
            log.warning(f"Mount probe failed for {device.path}: {error}")
            mount_points = []
        if mount_points:
            log.debug(f"Mount points for {device.path}: {', '.join(mount_points)}")
            return mount_points
        if attempt < attempts:
            log.debug(
                f"No mount points for {device.path} yet (attempt {attempt}/{attempts})"
            )
            time.sleep(interval)

    log.warning(f"No mount points found for {device.path} after {attempts} attempt(s)")
    return []

"""Removable device enumeration per host platform.

Linux:   lsblk JSON output; disks flagged removable, hotplug or on the USB
         transport
macOS:   diskutil plist output for external disks
Windows: wmic logical disks with drive type 2 (removable), identified by
         their drive letter (e.g. ``E:``)

Operations:
    - list_removable_devices(): Every removable device currently attached
    - get_device_info(): Fresh info for one device path

Example:
    >>> from tesla_usb_formatter.storage.devices import list_removable_devices
    >>> for device in list_removable_devices():
    ...     print(device.format_label())
    SanDisk Ultra (/dev/sdb, 59.6GB)
"""

from __future__ import annotations

import csv
import io
import json
import plistlib
from typing import Any, Optional

from tesla_usb_formatter.domain.models import Device
from tesla_usb_formatter.logging import LoggerFactory

from .commands import MACOS, WINDOWS, host_platform, run_command
from .exceptions import DeviceNotFoundError


log = LoggerFactory.for_usb()

LSBLK_COLUMNS = "NAME,PATH,SIZE,MODEL,VENDOR,RM,HOTPLUG,TRAN,TYPE"


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


# ==============================================================================
# Linux (lsblk)
# ==============================================================================


def _device_from_lsblk(entry: dict[str, Any]) -> Device:
    name = entry.get("name") or ""
    path = entry.get("path") or f"/dev/{name}"
    parts = [
        part.strip()
        for part in (entry.get("vendor"), entry.get("model"))
        if part and part.strip()
    ]
    return Device(
        name=" ".join(parts) or "USB Device",
        path=path,
        size=int(entry.get("size") or 0),
        is_removable=(
            _is_truthy(entry.get("rm"))
            or _is_truthy(entry.get("hotplug"))
            or entry.get("tran") == "usb"
        ),
    )


def _lsblk(args: list[str]) -> list[dict[str, Any]]:
    result = run_command(
        ["lsblk", "-J", "-b", "-o", LSBLK_COLUMNS, *args],
        log_output=False,
        log_command=False,
    )
    if result.returncode != 0:
        log.debug(f"lsblk failed: {result.stderr.strip()}")
        return []
    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as error:
        log.debug(f"lsblk returned invalid JSON: {error}")
        return []
    return data.get("blockdevices", []) or []


def _list_linux_devices() -> list[Device]:
    return [
        _device_from_lsblk(entry)
        for entry in _lsblk([])
        if entry.get("type") == "disk"
    ]


def _get_linux_device_info(device_path: str) -> Optional[Device]:
    entries = _lsblk(["-d", device_path])
    if not entries:
        return None
    return _device_from_lsblk(entries[0])


# ==============================================================================
# macOS (diskutil)
# ==============================================================================


def _diskutil_plist(args: list[str]) -> Optional[dict[str, Any]]:
    result = run_command(["diskutil", *args], log_output=False, log_command=False)
    if result.returncode != 0:
        log.debug(f"diskutil {args[0]} failed: {result.stderr.strip()}")
        return None
    try:
        return plistlib.loads(result.stdout.encode("utf-8"))
    except (plistlib.InvalidFileException, ValueError) as error:
        log.debug(f"diskutil returned invalid plist: {error}")
        return None


def _list_macos_devices() -> list[Device]:
    data = _diskutil_plist(["list", "-plist", "external"])
    if not data:
        return []
    devices = []
    for disk in data.get("AllDisksAndPartitions", []):
        device_id = disk.get("DeviceIdentifier", "")
        # Synthesized APFS containers appear alongside the physical disk
        if not device_id or disk.get("APFSPhysicalStores"):
            continue
        device = _get_macos_device_info(f"/dev/{device_id}")
        if device is not None:
            devices.append(device)
    return devices


def _get_macos_device_info(device_path: str) -> Optional[Device]:
    info = _diskutil_plist(["info", "-plist", device_path])
    if not info:
        return None
    if info.get("VirtualOrPhysical") == "Virtual":
        return None
    return Device(
        name=info.get("MediaName") or f"USB Device {device_path}",
        path=device_path,
        size=int(info.get("TotalSize") or info.get("Size") or 0),
        is_removable=bool(
            info.get("Removable")
            or info.get("RemovableMedia")
            or info.get("Ejectable")
            or info.get("Internal") is False
        ),
    )


# ==============================================================================
# Windows (wmic)
# ==============================================================================


def _wmic_logical_disks(where: str) -> list[dict[str, str]]:
    result = run_command(
        [
            "wmic",
            "logicaldisk",
            "where",
            where,
            "get",
            "Caption,Size,VolumeName",
            "/format:csv",
        ],
        log_output=False,
        log_command=False,
    )
    if result.returncode != 0:
        log.debug(f"wmic failed: {result.stderr.strip()}")
        return []
    lines = [line for line in result.stdout.splitlines() if line.strip()]
    return list(csv.DictReader(io.StringIO("\n".join(lines))))


def _device_from_wmic(row: dict[str, str]) -> Optional[Device]:
    caption = (row.get("Caption") or "").strip()
    size = (row.get("Size") or "").strip()
    if not caption or not size.isdigit():
        return None
    volume_name = (row.get("VolumeName") or "").strip()
    name = f"{volume_name} ({caption})" if volume_name else f"Removable Disk ({caption})"
    return Device(name=name, path=caption, size=int(size), is_removable=True)


def _list_windows_devices() -> list[Device]:
    devices = []
    for row in _wmic_logical_disks("drivetype=2"):
        device = _device_from_wmic(row)
        if device is not None:
            devices.append(device)
    return devices


def _get_windows_device_info(device_path: str) -> Optional[Device]:
    caption = device_path.rstrip("\\")
    for row in _wmic_logical_disks(f"caption='{caption}' and drivetype=2"):
        device = _device_from_wmic(row)
        if device is not None:
            return device
    return None


# ==============================================================================
# Public API
# ==============================================================================


def list_removable_devices(system: Optional[str] = None) -> list[Device]:
    """List removable devices on the host.

    Non-removable disks are never returned. Tools that are not installed or
    fail yield an empty list.
    """
    system = host_platform(system)
    try:
        if system == WINDOWS:
            devices = _list_windows_devices()
        elif system == MACOS:
            devices = _list_macos_devices()
        else:
            devices = _list_linux_devices()
    except OSError as error:
        log.error(f"Device enumeration failed: {error}")
        return []

    removable = [device for device in devices if device.is_removable]
    log.debug(
        f"Found {len(removable)} removable device(s): "
        f"{', '.join(device.path for device in removable) or 'none'}"
    )
    return removable


def get_device_info(device_path: str, system: Optional[str] = None) -> Device:
    """Fetch fresh info for one device.

    Raises:
        DeviceNotFoundError: If the path does not resolve to a live removable device
    """
    system = host_platform(system)
    try:
        if system == WINDOWS:
            device = _get_windows_device_info(device_path)
        elif system == MACOS:
            device = _get_macos_device_info(device_path)
        else:
            device = _get_linux_device_info(device_path)
    except OSError as error:
        log.error(f"Device lookup failed for {device_path}: {error}")
        device = None

    if device is None or not device.is_removable:
        raise DeviceNotFoundError(device_path)
    return device

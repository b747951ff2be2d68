"""Folder layout the Tesla firmware expects on each partition.

After formatting, every mounted partition whose mount point name carries one
of the Tesla volume labels gets the directories for its purpose:

    TeslaCam        -> TESLA_REQUIREMENTS.required_folders (TeslaCam and its
                       SavedClips, SentryClips, RecentClips)
    TeslaMusic      -> Music
    TeslaLightshow  -> LightShow

Creating the layout is idempotent; directories that already exist are left
alone.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Optional, Sequence

from tesla_usb_formatter.domain.models import Device, TeslaConfig
from tesla_usb_formatter.logging import LoggerFactory

from .exceptions import FolderLayoutError
from .mount import wait_for_mount_points
from .planner import (
    DASHCAM_LABEL,
    DASHCAM_PURPOSE,
    LIGHTSHOW_LABEL,
    LIGHTSHOW_PURPOSE,
    MUSIC_LABEL,
    MUSIC_PURPOSE,
)
from .requirements import TESLA_REQUIREMENTS


log = LoggerFactory.for_layout()

FOLDER_LAYOUTS: dict[str, tuple[str, ...]] = {
    DASHCAM_PURPOSE: TESLA_REQUIREMENTS.required_folders,
    MUSIC_PURPOSE: ("Music",),
    LIGHTSHOW_PURPOSE: ("LightShow",),
}

# Checked in order against the last segment of each mount point
MOUNT_POINT_MARKERS: tuple[tuple[str, str], ...] = (
    (DASHCAM_LABEL, DASHCAM_PURPOSE),
    (MUSIC_LABEL, MUSIC_PURPOSE),
    (LIGHTSHOW_LABEL, LIGHTSHOW_PURPOSE),
)


def _last_segment(mount_point: str) -> str:
    trimmed = mount_point.rstrip("/\\")
    return re.split(r"[/\\]", trimmed)[-1] if trimmed else ""


def purpose_for_mount_point(mount_point: str) -> Optional[str]:
    """Purpose tag for a mount point, or None when it carries no Tesla marker."""
    segment = _last_segment(mount_point)
    for marker, purpose in MOUNT_POINT_MARKERS:
        if marker in segment:
            return purpose
    return None


def install_folder_layout(mount_point: str | Path, purpose: str) -> list[Path]:
    """Create the directories for ``purpose`` under ``mount_point``.

    Returns:
        The directories that now exist (created or already present)

    Raises:
        KeyError: If ``purpose`` has no folder layout
        FolderLayoutError: If a directory cannot be created
    """
    root = Path(mount_point)
    ensured: list[Path] = []
    for relative in FOLDER_LAYOUTS[purpose]:
        path = root / relative
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise FolderLayoutError(str(path), error) from error
        ensured.append(path)
    log.info(f"Installed {purpose} layout under {root}")
    return ensured


def install_tesla_layout(
    device: Device,
    config: Optional[TeslaConfig] = None,
    probe: Optional[Callable[[Device], Sequence[str]]] = None,
) -> list[Path]:
    """Create the Tesla folder layout on every mounted partition of ``device``.

    Mount points without a Tesla marker are skipped. ``config`` is accepted
    for symmetry with the formatting flow; the layout is chosen from the
    mount point names alone.

    Raises:
        FolderLayoutError: If a directory cannot be created
    """
    probe = probe or wait_for_mount_points
    mount_points = probe(device)
    if not mount_points:
        log.warning(
            f"No mounted partitions found for {device.path}; folder layout skipped"
        )
        return []

    ensured: list[Path] = []
    for mount_point in mount_points:
        purpose = purpose_for_mount_point(mount_point)
        if purpose is None:
            log.debug(f"Ignoring mount point without Tesla marker: {mount_point}")
            continue
        ensured.extend(install_folder_layout(mount_point, purpose))
    return ensured

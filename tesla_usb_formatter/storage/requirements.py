"""Tesla-specific requirement checks for a TeslaConfig.

Only the Tesla formatting flow goes through these checks. Custom partition
plans rely on the capacity validator alone.
"""

from __future__ import annotations

from tesla_usb_formatter.domain.models import (
    Device,
    Filesystem,
    TeslaConfig,
    TeslaRequirements,
)

from .exceptions import (
    DashcamTooSmallError,
    DeviceTooSmallError,
    TotalExceedsCapacityError,
)


TESLA_REQUIREMENTS = TeslaRequirements(
    min_total_size_gb=32,
    min_dashcam_size_gb=32,
    recommended_write_speed_mbps=4,
    supported_filesystems=(
        Filesystem.EXFAT,
        Filesystem.FAT32,
        Filesystem.EXT3,
        Filesystem.EXT4,
    ),
    required_folders=(
        "TeslaCam",
        "TeslaCam/SavedClips",
        "TeslaCam/SentryClips",
        "TeslaCam/RecentClips",
    ),
)


def get_tesla_requirements() -> TeslaRequirements:
    return TESLA_REQUIREMENTS


def check_tesla_config(
    device: Device,
    config: TeslaConfig,
    requirements: TeslaRequirements = TESLA_REQUIREMENTS,
) -> None:
    """Validate a Tesla configuration against the fixed requirements.

    Checks run in order and the first violation is raised.

    Raises:
        DeviceTooSmallError: Device is smaller than the minimum total size
        DashcamTooSmallError: Dashcam request is below the minimum
        TotalExceedsCapacityError: All four sizes together exceed the device
    """
    device_size_gb = device.size_gb

    if device_size_gb < requirements.min_total_size_gb:
        raise DeviceTooSmallError(device_size_gb, requirements.min_total_size_gb)

    if config.dashcam_size_gb < requirements.min_dashcam_size_gb:
        raise DashcamTooSmallError(
            config.dashcam_size_gb, requirements.min_dashcam_size_gb
        )

    # sentry_size_gb is part of the total even though it gets no partition
    if config.total_size_gb > device_size_gb:
        raise TotalExceedsCapacityError(config.total_size_gb, device_size_gb)

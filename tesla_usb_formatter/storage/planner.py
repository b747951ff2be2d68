"""Partition planning for Tesla USB devices.

Turns either a TeslaConfig or a bare device size into an ordered list of
PartitionSpec. Nothing here touches the device.

Recommended split (``recommend_partitions``):
    1. Dashcam gets min(32, total / 2) GB
    2. If at least 8 GB remain, music gets min(remaining - 4, remaining / 2)
    3. Whatever is left goes to the light show, but only when it is >= 2 GB;
       otherwise it stays unallocated
"""

from __future__ import annotations

from tesla_usb_formatter.domain.models import Filesystem, PartitionSpec, TeslaConfig


DASHCAM_LABEL = "TeslaCam"
MUSIC_LABEL = "TeslaMusic"
LIGHTSHOW_LABEL = "TeslaLightshow"

DASHCAM_PURPOSE = "dashcam"
MUSIC_PURPOSE = "music"
LIGHTSHOW_PURPOSE = "lightshow"

MAX_RECOMMENDED_DASHCAM_GB = 32
MIN_REMAINING_FOR_MUSIC_GB = 8
MUSIC_RESERVE_GB = 4
MIN_LIGHTSHOW_GB = 2


def dashcam_partition(size_gb: int) -> PartitionSpec:
    return PartitionSpec(DASHCAM_LABEL, size_gb, Filesystem.EXFAT, DASHCAM_PURPOSE)


def music_partition(size_gb: int) -> PartitionSpec:
    return PartitionSpec(MUSIC_LABEL, size_gb, Filesystem.EXFAT, MUSIC_PURPOSE)


def lightshow_partition(size_gb: int) -> PartitionSpec:
    return PartitionSpec(
        LIGHTSHOW_LABEL, size_gb, Filesystem.EXFAT, LIGHTSHOW_PURPOSE
    )


def compile_tesla_config(config: TeslaConfig) -> list[PartitionSpec]:
    """Compile a TeslaConfig into a plan.

    Emits dashcam, music and light show partitions in that order, skipping
    any whose requested size is zero. Sentry size never produces a partition.
    """
    plan: list[PartitionSpec] = []
    if config.dashcam_size_gb > 0:
        plan.append(dashcam_partition(config.dashcam_size_gb))
    if config.music_size_gb > 0:
        plan.append(music_partition(config.music_size_gb))
    if config.lightshow_size_gb > 0:
        plan.append(lightshow_partition(config.lightshow_size_gb))
    return plan


def recommend_partitions(total_size_gb: int) -> list[PartitionSpec]:
    """Split a device of ``total_size_gb`` into a sensible Tesla layout.

    Example:
        >>> [(p.name, p.size_gb) for p in recommend_partitions(40)]
        [('TeslaCam', 20), ('TeslaMusic', 10), ('TeslaLightshow', 10)]
    """
    if total_size_gb < 0:
        raise ValueError(f"Total size must not be negative (got {total_size_gb})")

    dashcam_size = min(MAX_RECOMMENDED_DASHCAM_GB, total_size_gb // 2)
    remaining = total_size_gb - dashcam_size

    plan: list[PartitionSpec] = []
    if dashcam_size > 0:
        plan.append(dashcam_partition(dashcam_size))

    if remaining >= MIN_REMAINING_FOR_MUSIC_GB:
        music_size = min(remaining - MUSIC_RESERVE_GB, remaining // 2)
        plan.append(music_partition(music_size))

        lightshow_size = remaining - music_size
        if lightshow_size >= MIN_LIGHTSHOW_GB:
            plan.append(lightshow_partition(lightshow_size))

    return plan


def recommend_tesla_config(device_size_gb: int) -> TeslaConfig:
    """Suggest a TeslaConfig for a device of the given size."""
    if device_size_gb < 64:
        return TeslaConfig(dashcam_size_gb=32)
    if device_size_gb < 128:
        return TeslaConfig(dashcam_size_gb=32, music_size_gb=16, lightshow_size_gb=8)
    return TeslaConfig(dashcam_size_gb=64, music_size_gb=32, lightshow_size_gb=16)

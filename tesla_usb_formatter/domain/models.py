"""Domain model for Tesla USB preparation.

Type-safe objects passed between enumeration, planning, execution and
layout installation. All of them are immutable for the duration of one
planning + execution cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


GIB = 1024**3


# ==============================================================================
# Device Domain
# ==============================================================================


@dataclass(frozen=True)
class Device:
    """A removable storage device reported by enumeration.

    Identity is the platform path (``/dev/sdb``, ``/dev/disk4`` or ``E:``).
    """

    name: str  # Display name, e.g. "SanDisk Ultra"
    path: str  # Platform-specific path/identifier
    size: int  # Capacity in bytes
    is_removable: bool = True

    @property
    def size_gb(self) -> int:
        """Whole gigabytes (1024-based), rounded down."""
        return self.size // GIB

    def format_label(self) -> str:
        """Format a human-readable label for display.

        Returns: e.g., "SanDisk Ultra (/dev/sdb, 59.6GB)"
        """
        return f"{self.name} ({self.path}, {self.size / GIB:.1f}GB)"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "size": self.size,
            "is_removable": self.is_removable,
        }


# ==============================================================================
# Partition Plan Domain
# ==============================================================================


class Filesystem(Enum):
    """Filesystem kinds a plan may request.

    Availability depends on the partitioning backend; backends fall back to
    exFAT for kinds they cannot create.
    """

    EXFAT = "exfat"
    FAT32 = "fat32"
    NTFS = "ntfs"
    EXT3 = "ext3"
    EXT4 = "ext4"
    HFS_PLUS = "hfs+"

    @classmethod
    def parse(cls, value: str | Filesystem) -> Filesystem:
        """Parse a user supplied filesystem name.

        Raises:
            ValueError: If the name is not a known filesystem
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = _FILESYSTEM_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            known = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unsupported filesystem '{value}' (expected one of: {known})"
            ) from None


_FILESYSTEM_ALIASES = {
    "vfat": "fat32",
    "fat": "fat32",
    "hfsplus": "hfs+",
    "hfs": "hfs+",
}


@dataclass(frozen=True)
class PartitionSpec:
    """One planned partition.

    Order within a plan is significant: the first spec occupies the first
    sectors of the device.
    """

    name: str  # Partition / volume label
    size_gb: int
    filesystem: Filesystem = Filesystem.EXFAT
    purpose: str = ""  # Free-form tag, selects the folder layout

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Partition name must not be empty")
        if self.size_gb <= 0:
            raise ValueError(
                f"Partition {self.name} must have a positive size (got {self.size_gb} GB)"
            )

    @property
    def size_bytes(self) -> int:
        return self.size_gb * GIB

    @property
    def size_mb(self) -> int:
        return self.size_gb * 1024

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PartitionSpec:
        """Build a spec from a ``{name, size_gb, filesystem, purpose}`` mapping.

        Raises:
            KeyError: If name or size_gb is missing
            ValueError: If size or filesystem are invalid
        """
        return cls(
            name=str(data["name"]),
            size_gb=int(data["size_gb"]),
            filesystem=Filesystem.parse(data.get("filesystem") or "exfat"),
            purpose=str(data.get("purpose") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size_gb": self.size_gb,
            "filesystem": self.filesystem.value,
            "purpose": self.purpose,
        }


# ==============================================================================
# Tesla Configuration Domain
# ==============================================================================


@dataclass(frozen=True)
class TeslaConfig:
    """Vehicle-specific size request, compiled into a plan by the planner.

    ``sentry_size_gb`` counts towards the total capacity check but never
    produces a partition of its own.
    """

    dashcam_size_gb: int
    sentry_size_gb: int = 0
    music_size_gb: int = 0
    lightshow_size_gb: int = 0

    def __post_init__(self) -> None:
        for field_name in (
            "dashcam_size_gb",
            "sentry_size_gb",
            "music_size_gb",
            "lightshow_size_gb",
        ):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must not be negative")

    @property
    def total_size_gb(self) -> int:
        return (
            self.dashcam_size_gb
            + self.sentry_size_gb
            + self.music_size_gb
            + self.lightshow_size_gb
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "dashcam_size_gb": self.dashcam_size_gb,
            "sentry_size_gb": self.sentry_size_gb,
            "music_size_gb": self.music_size_gb,
            "lightshow_size_gb": self.lightshow_size_gb,
        }


@dataclass(frozen=True)
class TeslaRequirements:
    """Fixed limits a Tesla USB device has to meet."""

    min_total_size_gb: int
    min_dashcam_size_gb: int
    recommended_write_speed_mbps: int  # Informational only
    supported_filesystems: tuple[Filesystem, ...]
    required_folders: tuple[str, ...]

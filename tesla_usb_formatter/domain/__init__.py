"""Domain models for Tesla USB preparation.

This package contains the type-safe objects shared by the planner, the
validators, the partitioning backends and the layout installer.
"""

from __future__ import annotations

from .models import (
    GIB,
    Device,
    Filesystem,
    PartitionSpec,
    TeslaConfig,
    TeslaRequirements,
)


__all__ = [
    "GIB",
    "Device",
    "Filesystem",
    "PartitionSpec",
    "TeslaConfig",
    "TeslaRequirements",
]

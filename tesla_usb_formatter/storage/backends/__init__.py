"""Platform partitioning backends.

One backend per host platform, all behind ``PartitioningBackend``:

    diskpart  (Windows) - single scripted call
    diskutil  (macOS)   - erase, then one call per partition
    parted    (Linux)   - lay out all partitions, then format each
"""

from .base import PartitioningBackend, get_backend, select_backend
from .diskpart import DiskpartBackend
from .diskutil import DiskutilBackend
from .parted import PartedBackend


__all__ = [
    "DiskpartBackend",
    "DiskutilBackend",
    "PartedBackend",
    "PartitioningBackend",
    "get_backend",
    "select_backend",
]

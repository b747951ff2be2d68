"""Tesla USB formatting pipeline.

This module strings the planning and execution pieces together. Every stage
blocks until its external tools finish and the first failure stops the
pipeline.

Tesla flow (format_for_tesla):
    1. check_tesla_config()    - fixed Tesla minimums, nothing written yet
    2. compile_tesla_config()  - TeslaConfig -> ordered PartitionSpec list
    3. validate_plan()         - plan must fit the device capacity
    4. PartitionExecutor       - wipe, partition and format via the backend
    5. install_tesla_layout()  - TeslaCam/Music/LightShow folders

Custom flow (create_partitions):
    Steps 3 and 4 only; arbitrary plans skip the Tesla requirements.

Partial failures:
    Nothing is rolled back. If step 4 fails half way the device stays wiped
    or partially partitioned and the raised BackendFailedError names the
    step and partition that failed.

Example:
    >>> from tesla_usb_formatter.storage.format import format_for_tesla
    >>> format_for_tesla(device, TeslaConfig(dashcam_size_gb=32, music_size_gb=16))
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from tesla_usb_formatter.domain.models import Device, PartitionSpec, TeslaConfig
from tesla_usb_formatter.logging import LoggerFactory, operation_context

from .executor import PartitionExecutor
from .layout import install_tesla_layout
from .planner import compile_tesla_config
from .requirements import check_tesla_config
from .validation import ValidatedPlan, validate_plan


# Create logger for format operations
log = LoggerFactory.for_format()


def create_partitions(
    device: Device,
    plan: Iterable[PartitionSpec],
    executor: Optional[PartitionExecutor] = None,
) -> ValidatedPlan:
    """Validate ``plan`` against ``device`` and lay it out on the device.

    Raises:
        CapacityExceededError: If the plan does not fit (nothing written)
        BackendFailedError: If a partitioning tool fails
        StorageIOError: If the backend cannot write its scratch file
    """
    validated = validate_plan(device, plan)
    log.info(
        "Partitioning {} with {} partition(s): {}",
        device.format_label(),
        len(validated),
        ", ".join(f"{spec.name}={spec.size_gb}GB" for spec in validated),
    )
    (executor or PartitionExecutor()).execute(device, validated)
    return validated


def format_for_tesla(
    device: Device,
    config: TeslaConfig,
    executor: Optional[PartitionExecutor] = None,
    probe: Optional[Callable[[Device], Sequence[str]]] = None,
) -> list[Path]:
    """Make ``device`` Tesla-ready according to ``config``.

    Returns:
        The folders that exist on the new partitions afterwards

    Raises:
        RequirementViolationError: Config or device below the Tesla minimums
        CapacityExceededError: Compiled plan does not fit the device
        BackendFailedError: A partitioning tool failed
        StorageIOError: Scratch file or folder creation failed
    """
    with operation_context("format", device=device.path, **config.to_dict()) as op_log:
        check_tesla_config(device, config)
        plan = compile_tesla_config(config)
        create_partitions(device, plan, executor)
        folders = install_tesla_layout(device, config, probe=probe)
        op_log.info(
            "Tesla layout ready on {} ({} folder(s))", device.path, len(folders)
        )
        return folders

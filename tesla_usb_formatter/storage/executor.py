"""Runs a validated partition plan through the host's partitioning backend."""

from __future__ import annotations

from typing import Optional

from tesla_usb_formatter.domain.models import Device
from tesla_usb_formatter.logging import operation_context

from .backends import PartitioningBackend, get_backend
from .exceptions import BackendFailedError
from .validation import ValidatedPlan, ensure_validated


class PartitionExecutor:
    """Wipe, partition and format a device according to a ValidatedPlan.

    Failures are terminal and nothing is rolled back: a device may be left
    wiped or partially partitioned, which the raised error's step describes.
    """

    def __init__(self, backend: Optional[PartitioningBackend] = None) -> None:
        self.backend = backend or get_backend()

    def execute(self, device: Device, plan: ValidatedPlan) -> None:
        """
        Raises:
            TypeError: If ``plan`` did not come from validate_plan()
            ValueError: If ``plan`` was validated for another device
            CapacityExceededError: If ``device`` shrank below the validated plan
            BackendFailedError: If any external tool fails
            StorageIOError: If a scratch file cannot be written
        """
        plan = ensure_validated(device, plan)
        with operation_context(
            "partition",
            device=device.path,
            backend=self.backend.name,
            partitions=[spec.name for spec in plan],
        ) as log:
            try:
                self.backend.apply(device, plan.specs)
            except FileNotFoundError as error:
                raise BackendFailedError(
                    f"Running {self.backend.name}", f"tool not found: {error}"
                ) from error
            log.info(f"Created {len(plan)} partition(s) on {device.path}")

"""Safety validation for partition plans.

Every plan has to pass ``validate_plan`` before a backend is allowed to touch
the device. The function returns a ``ValidatedPlan`` token; the executor only
accepts that token and rejects anything else as a programming error.

Example:
    from tesla_usb_formatter.storage.validation import validate_plan

    try:
        validated = validate_plan(device, plan)
    except CapacityExceededError as error:
        print(error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tesla_usb_formatter.domain.models import Device, PartitionSpec

from .exceptions import CapacityExceededError


@dataclass(frozen=True)
class ValidatedPlan:
    """A plan that is known to fit on the device at ``device_path``."""

    device_path: str
    specs: tuple[PartitionSpec, ...]
    requested_bytes: int

    def __iter__(self):
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)


def total_plan_bytes(plan: Iterable[PartitionSpec]) -> int:
    """Sum of all partition sizes in bytes (1024-based GB)."""
    return sum(spec.size_bytes for spec in plan)


def validate_plan(device: Device, plan: Iterable[PartitionSpec]) -> ValidatedPlan:
    """Check that a plan fits within the device capacity.

    A plan whose total equals the device size exactly is accepted.

    Args:
        device: Target device
        plan: Ordered partition specs

    Returns:
        ValidatedPlan bound to the device path

    Raises:
        CapacityExceededError: If the plan is larger than the device
    """
    specs = tuple(plan)
    requested = total_plan_bytes(specs)
    if requested > device.size:
        raise CapacityExceededError(requested, device.size)
    return ValidatedPlan(
        device_path=device.path, specs=specs, requested_bytes=requested
    )


def ensure_validated(device: Device, plan: object) -> ValidatedPlan:
    """Reject plans that did not come out of ``validate_plan`` for this device.

    Raises:
        TypeError: If the plan was never validated
        ValueError: If the plan was validated for a different device
        CapacityExceededError: If the device reports less capacity than the
            plan was validated against
    """
    if not isinstance(plan, ValidatedPlan):
        raise TypeError(
            "Partition plan must be validated with validate_plan() before execution"
        )
    if plan.device_path != device.path:
        raise ValueError(
            f"Plan was validated for {plan.device_path}, not {device.path}"
        )
    if plan.requested_bytes > device.size:
        raise CapacityExceededError(plan.requested_bytes, device.size)
    return plan

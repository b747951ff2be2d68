"""Commands exposed to the surrounding application (CLI or UI).

Each command returns a CommandResult and never raises for storage errors;
failures are flattened into a human-readable message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from tesla_usb_formatter.domain.models import PartitionSpec, TeslaConfig
from tesla_usb_formatter.logging import LoggerFactory
from tesla_usb_formatter.storage import devices
from tesla_usb_formatter.storage.exceptions import StorageError
from tesla_usb_formatter.storage.executor import PartitionExecutor
from tesla_usb_formatter.storage.format import create_partitions, format_for_tesla
from tesla_usb_formatter.storage.registry import DeviceRegistry


log = LoggerFactory.for_system()

TESLA_SUCCESS_MESSAGE = "USB formatted successfully for Tesla"
PARTITIONS_SUCCESS_MESSAGE = "Partitions created successfully"


@dataclass
class CommandResult:
    success: bool
    message: str
    data: Any = None


def _failure(error: Exception) -> CommandResult:
    log.error(f"{type(error).__name__}: {error}")
    return CommandResult(success=False, message=str(error))


def get_usb_devices(registry: DeviceRegistry) -> CommandResult:
    """Enumerate removable devices and refresh the registry."""
    found = devices.list_removable_devices()
    registry.replace_all(found)
    return CommandResult(
        success=True, message=f"Found {len(found)} removable device(s)", data=found
    )


def get_device_info(device_path: str) -> CommandResult:
    try:
        device = devices.get_device_info(device_path)
    except StorageError as error:
        return _failure(error)
    return CommandResult(success=True, message=device.format_label(), data=device)


def format_tesla_usb(
    registry: DeviceRegistry,
    device_path: str,
    config: TeslaConfig,
    executor: Optional[PartitionExecutor] = None,
) -> CommandResult:
    try:
        device = registry.get(device_path)
        with registry.device_operation(device.path):
            folders = format_for_tesla(device, config, executor=executor)
    except (StorageError, OSError) as error:
        return _failure(error)
    return CommandResult(success=True, message=TESLA_SUCCESS_MESSAGE, data=folders)


def create_custom_partitions(
    registry: DeviceRegistry,
    device_path: str,
    partitions: Iterable[Union[PartitionSpec, dict]],
    executor: Optional[PartitionExecutor] = None,
) -> CommandResult:
    try:
        plan = [
            spec if isinstance(spec, PartitionSpec) else PartitionSpec.from_dict(spec)
            for spec in partitions
        ]
    except (KeyError, TypeError, ValueError) as error:
        return CommandResult(success=False, message=f"Invalid partition: {error}")
    if not plan:
        return CommandResult(success=False, message="No partitions specified")

    try:
        device = registry.get(device_path)
        with registry.device_operation(device.path):
            validated = create_partitions(device, plan, executor=executor)
    except (StorageError, OSError) as error:
        return _failure(error)
    return CommandResult(
        success=True, message=PARTITIONS_SUCCESS_MESSAGE, data=list(validated.specs)
    )

"""Custom exceptions for storage operations.

This module defines a hierarchy of exceptions for storage operations to provide
more specific error handling and better error messages.

Exception Hierarchy:
    StorageError (base)
        ├── DeviceError
        │   ├── DeviceNotFoundError
        │   └── DeviceBusyError
        ├── CapacityExceededError
        ├── RequirementViolationError
        │   ├── DeviceTooSmallError
        │   ├── DashcamTooSmallError
        │   └── TotalExceedsCapacityError
        ├── BackendFailedError
        └── StorageIOError
            ├── PartitionScriptError
            └── FolderLayoutError

Validation errors (capacity, requirements) are raised before anything is
written to the device. BackendFailedError and StorageIOError may be raised
after destructive steps have already run; their messages name the step that
failed so the caller can tell how far the device got.

Usage:
    from tesla_usb_formatter.storage.exceptions import CapacityExceededError

    if requested > device.size:
        raise CapacityExceededError(requested, device.size)
"""

from typing import Optional


_GIB = 1024**3


class StorageError(Exception):
    """Base exception for all storage operations."""



class DeviceError(StorageError):
    """Base exception for device-related errors."""



class DeviceNotFoundError(DeviceError):
    """Device was not found or is not a live removable device."""

    def __init__(self, device_path: str):
        self.device_path = device_path
        super().__init__(f"Device not found: {device_path}")


class DeviceBusyError(DeviceError):
    """Another operation is already running against the device."""

    def __init__(self, device_path: str, reason: str = ""):
        self.device_path = device_path
        self.reason = reason
        msg = f"Device {device_path} is busy"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CapacityExceededError(StorageError):
    """The partition plan does not fit on the device."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Total partition size ({requested // _GIB} GB) exceeds "
            f"device capacity ({available // _GIB} GB)"
        )


class RequirementViolationError(StorageError):
    """A Tesla configuration failed one of the fixed requirements.

    Attributes:
        quantity: The offending value in GB
        limit: The limit it was checked against in GB
    """

    def __init__(self, message: str, quantity: int, limit: int):
        self.quantity = quantity
        self.limit = limit
        super().__init__(message)


class DeviceTooSmallError(RequirementViolationError):
    """Device is below the minimum total size."""

    def __init__(self, device_size_gb: int, minimum_gb: int):
        super().__init__(
            f"Device size ({device_size_gb} GB) is below Tesla minimum "
            f"requirement ({minimum_gb} GB)",
            device_size_gb,
            minimum_gb,
        )


class DashcamTooSmallError(RequirementViolationError):
    """Requested dashcam partition is below the minimum size."""

    def __init__(self, dashcam_size_gb: int, minimum_gb: int):
        super().__init__(
            f"Dashcam partition size ({dashcam_size_gb} GB) is below Tesla "
            f"minimum requirement ({minimum_gb} GB)",
            dashcam_size_gb,
            minimum_gb,
        )


class TotalExceedsCapacityError(RequirementViolationError):
    """Sum of all requested sizes is larger than the device."""

    def __init__(self, total_size_gb: int, device_size_gb: int):
        super().__init__(
            f"Total configured size ({total_size_gb} GB) exceeds device "
            f"capacity ({device_size_gb} GB)",
            total_size_gb,
            device_size_gb,
        )


class BackendFailedError(StorageError):
    """An external partitioning or formatting tool reported failure.

    The device may already be partially modified when this is raised.
    """

    def __init__(self, step: str, stderr: str, partition: Optional[str] = None):
        self.step = step
        self.stderr = stderr
        self.partition = partition
        detail = stderr.strip() or "no error output"
        if partition:
            message = f"{step} failed for partition {partition}: {detail}"
        else:
            message = f"{step} failed: {detail}"
        super().__init__(message)


class StorageIOError(StorageError):
    """Local filesystem failure (scratch files, folder creation)."""



class PartitionScriptError(StorageIOError):
    """The partitioning script could not be written."""

    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Failed to write partition script {path}: {error}")


class FolderLayoutError(StorageIOError):
    """A required folder could not be created on a formatted partition."""

    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Failed to create folder {path}: {error}")

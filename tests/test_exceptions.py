"""Tests for storage exception classes."""

from tesla_usb_formatter.domain.models import GIB
from tesla_usb_formatter.storage.exceptions import (
    BackendFailedError,
    CapacityExceededError,
    DashcamTooSmallError,
    DeviceBusyError,
    DeviceError,
    DeviceNotFoundError,
    DeviceTooSmallError,
    FolderLayoutError,
    PartitionScriptError,
    RequirementViolationError,
    StorageError,
    StorageIOError,
    TotalExceedsCapacityError,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_storage_error_is_base_exception(self):
        error = StorageError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    def test_requirement_violations_share_base(self):
        for error in (
            DeviceTooSmallError(20, 32),
            DashcamTooSmallError(16, 32),
            TotalExceedsCapacityError(70, 64),
        ):
            assert isinstance(error, RequirementViolationError)
            assert isinstance(error, StorageError)

    def test_io_errors_share_base(self):
        assert isinstance(PartitionScriptError("/tmp/x", OSError("full")), StorageIOError)
        assert isinstance(FolderLayoutError("/mnt/x", OSError("ro")), StorageIOError)

    def test_device_errors(self):
        assert isinstance(DeviceNotFoundError("/dev/sdz"), DeviceError)
        assert isinstance(DeviceBusyError("/dev/sdb"), DeviceError)


class TestMessages:
    def test_capacity_exceeded(self):
        error = CapacityExceededError(70 * GIB, 64 * GIB)
        assert error.requested == 70 * GIB
        assert error.available == 64 * GIB
        assert str(error) == (
            "Total partition size (70 GB) exceeds device capacity (64 GB)"
        )

    def test_device_too_small_names_quantity_and_limit(self):
        error = DeviceTooSmallError(20, 32)
        assert error.quantity == 20
        assert error.limit == 32
        assert "20 GB" in str(error)
        assert "32 GB" in str(error)

    def test_dashcam_too_small(self):
        error = DashcamTooSmallError(16, 32)
        assert "Dashcam partition size (16 GB)" in str(error)

    def test_total_exceeds_capacity(self):
        error = TotalExceedsCapacityError(70, 64)
        assert "Total configured size (70 GB)" in str(error)

    def test_backend_failed_with_partition(self):
        error = BackendFailedError("Creating partition", "Disk busy\n", "TeslaMusic")
        assert error.partition == "TeslaMusic"
        assert str(error) == (
            "Creating partition failed for partition TeslaMusic: Disk busy"
        )

    def test_backend_failed_without_partition(self):
        error = BackendFailedError("Diskpart", "")
        assert str(error) == "Diskpart failed: no error output"

    def test_device_busy_reason(self):
        error = DeviceBusyError("/dev/sdb", "formatting")
        assert str(error) == "Device /dev/sdb is busy: formatting"

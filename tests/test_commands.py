"""Tests for the command layer used by the CLI."""

from unittest.mock import Mock, patch

import pytest

from tesla_usb_formatter.domain.models import PartitionSpec, TeslaConfig
from tesla_usb_formatter.services import commands
from tesla_usb_formatter.storage.exceptions import BackendFailedError, DeviceNotFoundError
from tesla_usb_formatter.storage.executor import PartitionExecutor
from tesla_usb_formatter.storage.registry import DeviceRegistry


@pytest.fixture
def registry(usb_device, small_device):
    registry = DeviceRegistry()
    registry.replace_all([usb_device, small_device])
    return registry


@pytest.fixture
def backend():
    mock = Mock()
    mock.name = "fake"
    return mock


@pytest.fixture
def executor(backend):
    return PartitionExecutor(backend)


class TestGetUsbDevices:
    @patch("tesla_usb_formatter.services.commands.devices.list_removable_devices")
    def test_refreshes_registry(self, mock_list, usb_device):
        mock_list.return_value = [usb_device]
        registry = DeviceRegistry()

        result = commands.get_usb_devices(registry)

        assert result.success
        assert result.data == [usb_device]
        assert registry.get("/dev/sdb") is usb_device


class TestGetDeviceInfo:
    @patch("tesla_usb_formatter.services.commands.devices.get_device_info")
    def test_success(self, mock_info, usb_device):
        mock_info.return_value = usb_device
        result = commands.get_device_info("/dev/sdb")
        assert result.success
        assert result.data is usb_device

    @patch(
        "tesla_usb_formatter.services.commands.devices.get_device_info",
        side_effect=DeviceNotFoundError("/dev/sdz"),
    )
    def test_not_found(self, _info):
        result = commands.get_device_info("/dev/sdz")
        assert not result.success
        assert result.message == "Device not found: /dev/sdz"


class TestFormatTeslaUsb:
    @patch("tesla_usb_formatter.storage.format.install_tesla_layout", return_value=[])
    def test_success(self, _layout, registry, executor, backend):
        result = commands.format_tesla_usb(
            registry, "/dev/sdb", TeslaConfig(32, music_size_gb=16), executor
        )

        assert result.success
        assert result.message == "USB formatted successfully for Tesla"
        backend.apply.assert_called_once()
        assert not registry.is_operation_active("/dev/sdb")

    def test_requirement_violation_is_reported(self, registry, executor, backend):
        result = commands.format_tesla_usb(registry, "/dev/sdc", TeslaConfig(32), executor)

        assert not result.success
        assert "below Tesla minimum" in result.message
        backend.apply.assert_not_called()

    def test_unknown_device(self, registry, executor):
        result = commands.format_tesla_usb(registry, "/dev/sdz", TeslaConfig(32), executor)
        assert not result.success
        assert "/dev/sdz" in result.message

    def test_busy_device(self, registry, executor, backend):
        with registry.device_operation("/dev/sdb"):
            result = commands.format_tesla_usb(registry, "/dev/sdb", TeslaConfig(32), executor)

        assert not result.success
        assert "busy" in result.message
        backend.apply.assert_not_called()


class TestCreateCustomPartitions:
    def test_accepts_dicts_and_specs(self, registry, executor, backend):
        result = commands.create_custom_partitions(
            registry,
            "/dev/sdb",
            [
                {"name": "Data", "size_gb": 16, "filesystem": "ntfs"},
                PartitionSpec("Backup", 8),
            ],
            executor,
        )

        assert result.success
        assert result.message == "Partitions created successfully"
        assert [spec.name for spec in result.data] == ["Data", "Backup"]
        backend.apply.assert_called_once()

    def test_capacity_exceeded(self, registry, executor, backend):
        result = commands.create_custom_partitions(
            registry, "/dev/sdb", [PartitionSpec("Huge", 65)], executor
        )

        assert not result.success
        assert "exceeds device capacity" in result.message
        backend.apply.assert_not_called()

    def test_small_device_accepts_custom_plan(self, registry, executor):
        result = commands.create_custom_partitions(
            registry, "/dev/sdc", [PartitionSpec("Data", 20)], executor
        )
        assert result.success

    def test_invalid_partition(self, registry, executor):
        result = commands.create_custom_partitions(
            registry, "/dev/sdb", [{"name": "Data", "size_gb": 0}], executor
        )
        assert not result.success
        assert result.message.startswith("Invalid partition")

    def test_empty_plan(self, registry, executor):
        result = commands.create_custom_partitions(registry, "/dev/sdb", [], executor)
        assert not result.success
        assert result.message == "No partitions specified"

    def test_backend_failure(self, registry, executor, backend):
        backend.apply.side_effect = BackendFailedError("Diskpart", "Access denied")

        result = commands.create_custom_partitions(
            registry, "/dev/sdb", [PartitionSpec("Data", 8)], executor
        )

        assert not result.success
        assert result.message == "Diskpart failed: Access denied"
        assert not registry.is_operation_active()

"""Tests for the device registry."""

import threading

import pytest

from tesla_usb_formatter.domain.models import GIB, Device
from tesla_usb_formatter.storage.exceptions import DeviceBusyError, DeviceNotFoundError
from tesla_usb_formatter.storage.registry import DeviceRegistry


@pytest.fixture
def registry(usb_device, small_device):
    registry = DeviceRegistry()
    registry.replace_all([usb_device, small_device])
    return registry


class TestLookup:
    def test_get(self, registry, usb_device):
        assert registry.get("/dev/sdb") is usb_device

    def test_get_unknown(self, registry):
        with pytest.raises(DeviceNotFoundError):
            registry.get("/dev/sdz")

    def test_contains_and_len(self, registry):
        assert "/dev/sdb" in registry
        assert "/dev/sdz" not in registry
        assert len(registry) == 2

    def test_replace_all_drops_stale_devices(self, registry):
        registry.replace_all([Device(name="New", path="/dev/sde", size=GIB)])
        assert [device.path for device in registry.all()] == ["/dev/sde"]
        assert "/dev/sdb" not in registry


class TestDeviceOperation:
    def test_marks_device_busy(self, registry):
        assert not registry.is_operation_active()
        with registry.device_operation("/dev/sdb"):
            assert registry.is_operation_active()
            assert registry.is_operation_active("/dev/sdb")
            assert not registry.is_operation_active("/dev/sdc")
        assert not registry.is_operation_active()

    def test_second_operation_on_same_device_refused(self, registry):
        with registry.device_operation("/dev/sdb"):
            with pytest.raises(DeviceBusyError):
                with registry.device_operation("/dev/sdb"):
                    pass

    def test_different_devices_in_parallel(self, registry):
        with registry.device_operation("/dev/sdb"):
            with registry.device_operation("/dev/sdc"):
                assert registry.is_operation_active("/dev/sdc")

    def test_released_after_error(self, registry):
        with pytest.raises(RuntimeError):
            with registry.device_operation("/dev/sdb"):
                raise RuntimeError("boom")
        assert not registry.is_operation_active("/dev/sdb")

    def test_refused_across_threads(self, registry):
        started = threading.Event()
        release = threading.Event()
        errors = []

        def hold():
            with registry.device_operation("/dev/sdb"):
                started.set()
                release.wait(5)

        worker = threading.Thread(target=hold)
        worker.start()
        started.wait(5)
        try:
            with registry.device_operation("/dev/sdb"):
                pass
        except DeviceBusyError as error:
            errors.append(error)
        finally:
            release.set()
            worker.join(5)

        assert len(errors) == 1

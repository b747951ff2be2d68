"""Tests for partition plan capacity validation."""

import pytest

from tesla_usb_formatter.domain.models import GIB, Device, PartitionSpec
from tesla_usb_formatter.storage.exceptions import CapacityExceededError
from tesla_usb_formatter.storage.validation import (
    ValidatedPlan,
    ensure_validated,
    total_plan_bytes,
    validate_plan,
)


class TestValidatePlan:
    def test_plan_within_capacity(self, usb_device, three_part_plan):
        validated = validate_plan(usb_device, three_part_plan)

        assert isinstance(validated, ValidatedPlan)
        assert validated.device_path == "/dev/sdb"
        assert validated.specs == tuple(three_part_plan)
        assert validated.requested_bytes == 56 * GIB

    def test_exact_capacity_is_accepted(self, usb_device):
        plan = [PartitionSpec("A", 32), PartitionSpec("B", 32)]
        validated = validate_plan(usb_device, plan)
        assert validated.requested_bytes == usb_device.size

    def test_one_byte_short_is_rejected(self):
        device = Device(name="Stick", path="/dev/sdb", size=64 * GIB - 1)
        with pytest.raises(CapacityExceededError) as excinfo:
            validate_plan(device, [PartitionSpec("A", 64)])
        assert excinfo.value.requested == 64 * GIB
        assert excinfo.value.available == 64 * GIB - 1

    def test_empty_plan_fits(self, usb_device):
        assert len(validate_plan(usb_device, [])) == 0

    def test_accepts_generators(self, usb_device):
        validated = validate_plan(usb_device, (PartitionSpec("A", n) for n in (1, 2)))
        assert [spec.size_gb for spec in validated] == [1, 2]

    def test_total_plan_bytes_uses_binary_gigabytes(self, three_part_plan):
        assert total_plan_bytes(three_part_plan) == 56 * 1024 * 1024 * 1024


class TestEnsureValidated:
    def test_raw_plan_is_a_programming_error(self, usb_device, three_part_plan):
        with pytest.raises(TypeError, match="validate_plan"):
            ensure_validated(usb_device, three_part_plan)

    def test_plan_for_other_device_rejected(self, usb_device, three_part_plan):
        other = Device(name="Other", path="/dev/sdc", size=usb_device.size)
        validated = validate_plan(other, three_part_plan)
        with pytest.raises(ValueError, match="/dev/sdc"):
            ensure_validated(usb_device, validated)

    def test_returns_plan(self, usb_device, three_part_plan):
        validated = validate_plan(usb_device, three_part_plan)
        assert ensure_validated(usb_device, validated) is validated

    def test_device_that_shrank_is_rejected(self, usb_device, three_part_plan):
        validated = validate_plan(usb_device, three_part_plan)
        shrunk = Device(name=usb_device.name, path=usb_device.path, size=32 * GIB)

        with pytest.raises(CapacityExceededError) as excinfo:
            ensure_validated(shrunk, validated)

        assert excinfo.value.requested == 56 * GIB
        assert excinfo.value.available == 32 * GIB

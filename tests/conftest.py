"""
Pytest configuration and shared fixtures for tesla-usb-formatter tests.

This module provides common fixtures and utilities used across all test modules.
"""

from typing import List
from unittest.mock import Mock

import pytest

from tesla_usb_formatter.domain.models import GIB, Device, PartitionSpec


# ==============================================================================
# Device Fixtures
# ==============================================================================


@pytest.fixture
def usb_device() -> Device:
    """A 64 GB removable USB stick on Linux."""
    return Device(name="SanDisk Ultra", path="/dev/sdb", size=64 * GIB)


@pytest.fixture
def small_device() -> Device:
    """A 20 GB removable device, below the Tesla minimum."""
    return Device(name="Old Stick", path="/dev/sdc", size=20 * GIB)


@pytest.fixture
def three_part_plan() -> List[PartitionSpec]:
    """Dashcam, music and light show specs totalling 56 GB."""
    return [
        PartitionSpec("TeslaCam", 32, purpose="dashcam"),
        PartitionSpec("TeslaMusic", 16, purpose="music"),
        PartitionSpec("TeslaLightshow", 8, purpose="lightshow"),
    ]


# ==============================================================================
# Command Result Helpers
# ==============================================================================


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> Mock:
    return Mock(returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def completed():
    """Factory for stand-ins of subprocess.CompletedProcess."""
    return _completed

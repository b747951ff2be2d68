"""Tests for the Tesla folder layout."""

from unittest.mock import Mock, patch

import pytest

from tesla_usb_formatter.domain.models import GIB, Device
from tesla_usb_formatter.storage.exceptions import FolderLayoutError
from tesla_usb_formatter.storage.layout import (
    FOLDER_LAYOUTS,
    install_folder_layout,
    install_tesla_layout,
    purpose_for_mount_point,
)
from tesla_usb_formatter.storage.mount import mount_points_for
from tesla_usb_formatter.storage.requirements import TESLA_REQUIREMENTS


class TestPurposeForMountPoint:
    @pytest.mark.parametrize(
        "mount_point,expected",
        [
            ("/media/pi/TeslaCam", "dashcam"),
            ("/Volumes/TeslaCam 1", "dashcam"),
            ("/media/pi/TeslaMusic/", "music"),
            ("/Volumes/TeslaLightshow", "lightshow"),
            ("E:\\", None),
            ("/media/TeslaCam/backup", None),
            ("/media/pi/USB", None),
        ],
    )
    def test_markers(self, mount_point, expected):
        assert purpose_for_mount_point(mount_point) == expected


class TestInstallFolderLayout:
    def test_dashcam_folders(self, tmp_path):
        created = install_folder_layout(tmp_path, "dashcam")

        assert created == [
            tmp_path / "TeslaCam",
            tmp_path / "TeslaCam" / "SavedClips",
            tmp_path / "TeslaCam" / "SentryClips",
            tmp_path / "TeslaCam" / "RecentClips",
        ]
        assert all(path.is_dir() for path in created)

    def test_dashcam_layout_matches_requirements(self, tmp_path):
        assert FOLDER_LAYOUTS["dashcam"] == TESLA_REQUIREMENTS.required_folders

        created = install_folder_layout(tmp_path, "dashcam")

        for folder in TESLA_REQUIREMENTS.required_folders:
            assert tmp_path / folder in created

    def test_idempotent(self, tmp_path):
        (tmp_path / "Music").mkdir()
        (tmp_path / "Music" / "song.mp3").write_bytes(b"id3")

        first = install_folder_layout(tmp_path, "music")
        second = install_folder_layout(tmp_path, "music")

        assert first == second == [tmp_path / "Music"]
        assert (tmp_path / "Music" / "song.mp3").exists()

    def test_unknown_purpose(self, tmp_path):
        with pytest.raises(KeyError):
            install_folder_layout(tmp_path, "photos")

    def test_mkdir_failure(self, tmp_path):
        with patch("pathlib.Path.mkdir", side_effect=PermissionError("read-only")):
            with pytest.raises(FolderLayoutError, match="LightShow"):
                install_folder_layout(tmp_path, "lightshow")


class TestInstallTeslaLayout:
    def test_installs_per_mount_point(self, tmp_path, usb_device):
        cam = tmp_path / "TeslaCam"
        music = tmp_path / "TeslaMusic"
        other = tmp_path / "Backup"
        for path in (cam, music, other):
            path.mkdir()
        probe = Mock(return_value=[str(cam), str(music), str(other)])

        created = install_tesla_layout(usb_device, probe=probe)

        probe.assert_called_once_with(usb_device)
        assert (cam / "TeslaCam" / "RecentClips").is_dir()
        assert (music / "Music").is_dir()
        assert list(other.iterdir()) == []
        assert len(created) == 5

    def test_no_mount_points(self, usb_device):
        assert install_tesla_layout(usb_device, probe=Mock(return_value=[])) == []

    def test_run_twice(self, tmp_path, usb_device):
        cam = tmp_path / "TeslaCam"
        cam.mkdir()
        probe = Mock(return_value=[str(cam)])

        assert install_tesla_layout(usb_device, probe=probe) == install_tesla_layout(
            usb_device, probe=probe
        )

    def test_default_probe_polls_mount_table(self, mocker, usb_device):
        probe = mocker.patch(
            "tesla_usb_formatter.storage.layout.wait_for_mount_points", return_value=[]
        )

        assert install_tesla_layout(usb_device) == []
        probe.assert_called_once_with(usb_device)

    def test_windows_drive_root_gets_no_layout(self):
        device = Device(name="Removable Disk (E:)", path="E:", size=64 * GIB)

        created = install_tesla_layout(
            device, probe=lambda d: mount_points_for(d, system="windows")
        )

        assert created == []

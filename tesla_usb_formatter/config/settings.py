"""Settings storage for application configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


SETTINGS_PATH = Path(
    os.environ.get(
        "TESLA_USB_FORMATTER_SETTINGS_PATH",
        Path.home() / ".config" / "tesla-usb-formatter" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_MOUNT_PROBE_ATTEMPTS = 3
DEFAULT_MOUNT_PROBE_INTERVAL_SECONDS = 1.0
DEFAULT_SETTLE_TIMEOUT_SECONDS = 10
DEFAULT_WINDOWS_DRIVE_LETTERS = "ZYXWVUTSRQPONMLKJIHGFED"

DEFAULT_SETTINGS: dict[str, Any] = {
    "mount_probe_attempts": DEFAULT_MOUNT_PROBE_ATTEMPTS,
    "mount_probe_interval_seconds": DEFAULT_MOUNT_PROBE_INTERVAL_SECONDS,
    "settle_timeout_seconds": DEFAULT_SETTLE_TIMEOUT_SECONDS,
    "windows_drive_letters": DEFAULT_WINDOWS_DRIVE_LETTERS,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(get_setting(key, default))
    except (TypeError, ValueError):
        return default


def get_float(key: str, default: float = 0.0) -> float:
    try:
        return float(get_setting(key, default))
    except (TypeError, ValueError):
        return default


load_settings()

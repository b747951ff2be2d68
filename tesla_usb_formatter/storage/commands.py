"""External command execution shared by enumeration, probing and backends."""

from __future__ import annotations

import subprocess
import sys
from typing import Optional, Sequence

from tesla_usb_formatter.logging import LoggerFactory


log = LoggerFactory.for_system()
output_log = LoggerFactory.for_command_output()

WINDOWS = "windows"
MACOS = "macos"
LINUX = "linux"

# Keeps diskpart/wmic from flashing a console window (CREATE_NO_WINDOW)
_CREATE_NO_WINDOW = 0x08000000


def host_platform(system: Optional[str] = None) -> str:
    """Map ``sys.platform`` onto one of the supported platform names."""
    system = system or sys.platform
    if system in (WINDOWS, MACOS, LINUX):
        return system
    if system.startswith("win"):
        return WINDOWS
    if system == "darwin":
        return MACOS
    return LINUX


def run_command(
    command: Sequence[str],
    check: bool = False,
    log_output: bool = True,
    log_command: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external tool and capture its output.

    The caller decides what a non-zero exit means; with ``check=True`` a
    ``CalledProcessError`` is raised instead.

    Raises:
        FileNotFoundError: If the executable is not installed
        subprocess.CalledProcessError: If check=True and the command fails
    """
    command = [str(part) for part in command]
    if log_command:
        log.debug(f"Running command: {' '.join(command)}")
    kwargs = {}
    if host_platform() == WINDOWS:
        kwargs["creationflags"] = _CREATE_NO_WINDOW
    try:
        result = subprocess.run(
            command, check=check, text=True, capture_output=True, **kwargs
        )
    except subprocess.CalledProcessError as error:
        log.debug(f"Command failed: {' '.join(command)}")
        if error.stdout:
            output_log.trace(f"stdout: {error.stdout.strip()}")
        if error.stderr:
            log.debug(f"stderr: {error.stderr.strip()}")
        raise
    if result.stdout and log_output:
        output_log.trace(f"stdout: {result.stdout.strip()}")
    if result.stderr and (log_output or result.returncode != 0):
        log.debug(f"stderr: {result.stderr.strip()}")
    if log_command:
        log.debug(f"Command completed with return code {result.returncode}")
    return result


def failure_text(result: subprocess.CompletedProcess) -> str:
    """Best diagnostic text from a failed command: stderr, else stdout."""
    stderr = (result.stderr or "").strip()
    stdout = (result.stdout or "").strip()
    return stderr or stdout or f"exit code {result.returncode}"

# common/system_utils.py
# -*- coding: utf-8 -*-
"""
System-level utility functions.

This module inspects the host the provisioner runs on, e.g. to tell a
Windows Subsystem for Linux host apart from a native Linux one.
"""

import logging
import platform
from pathlib import Path
from typing import Optional

from common.command_utils import log_step_message
from provisioner.config_models import SYMBOLS_DEFAULT, ProvisionSettings

module_logger = logging.getLogger(__name__)

PROC_VERSION_PATH = Path("/proc/version")

HOST_WSL = "wsl"
HOST_LINUX = "linux"
HOST_MACOS = "darwin"
HOST_WINDOWS = "windows"
HOST_UNKNOWN = "unknown"


def is_wsl(
    proc_version_path: Path = PROC_VERSION_PATH,
    app_settings: Optional[ProvisionSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Return True when running under Windows Subsystem for Linux.

    WSL kernels identify themselves with "microsoft" in /proc/version.
    An unreadable file is treated as "not WSL".
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )
    try:
        content = proc_version_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return False
    except OSError as e:
        log_step_message(
            f"{symbols.get('warning', '!')} Could not read {proc_version_path}: {e}",
            "warning",
            logger_to_use,
            app_settings,
        )
        return False
    return "microsoft" in content.lower()


def detect_host_variant(
    app_settings: Optional[ProvisionSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> str:
    """
    Identify the host platform: "wsl", "linux", "darwin", "windows" or "unknown".
    """
    system = platform.system().lower()
    if system == "linux":
        if is_wsl(app_settings=app_settings, current_logger=current_logger):
            return HOST_WSL
        return HOST_LINUX
    if system == "darwin":
        return HOST_MACOS
    if system == "windows":
        return HOST_WINDOWS
    return HOST_UNKNOWN

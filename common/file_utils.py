# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: directories with permissions, settings
template copies and directory cleanup.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from provisioner.config_models import SYMBOLS_DEFAULT, ProvisionSettings

from .command_utils import log_step_message

module_logger = logging.getLogger(__name__)


def _symbols(app_settings: Optional[ProvisionSettings]):
    return (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )


def ensure_directory(
    dir_path: Path,
    mode: int,
    app_settings: Optional[ProvisionSettings],
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Ensure a directory exists and carries the given permission bits.

    Missing parents are created. The mode is applied whether or not the
    directory already existed. Errors propagate to the caller.

    Parameters:
        dir_path (Path): Directory to create or fix.
        mode (int): Permission bits, e.g. ``0o755``.
        app_settings (Optional[ProvisionSettings]): Settings providing log symbols.
        current_logger (Optional[logging.Logger]): Logger to use.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = _symbols(app_settings)

    if not dir_path.exists():
        dir_path.mkdir(parents=True, exist_ok=True)
        log_step_message(
            f"{symbols.get('success', '✅')} Created directory: {dir_path}",
            "info",
            logger_to_use,
            app_settings,
        )
    elif not dir_path.is_dir():
        raise NotADirectoryError(f"{dir_path} exists but is not a directory")

    dir_path.chmod(mode)
    log_step_message(
        f"Set permissions {oct(mode)} on {dir_path}",
        "debug",
        logger_to_use,
        app_settings,
    )


def copy_if_absent(
    source: Path,
    destination: Path,
    app_settings: Optional[ProvisionSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Copy ``source`` to ``destination`` only if the destination does not exist.

    An existing destination is never touched, so repeated calls are
    idempotent.

    Returns:
        bool: True if a copy was made, False if the destination already existed.

    Raises:
        FileNotFoundError: The destination is absent and so is the source.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = _symbols(app_settings)

    if destination.exists():
        log_step_message(
            f"{symbols.get('info', 'ℹ️')} {destination} already exists. Leaving it untouched.",
            "info",
            logger_to_use,
            app_settings,
        )
        return False

    if not source.is_file():
        raise FileNotFoundError(f"Template not found: {source}")

    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)
    log_step_message(
        f"{symbols.get('success', '✅')} Copied {source} to {destination}",
        "info",
        logger_to_use,
        app_settings,
    )
    return True


def replace_file(
    source: Path,
    destination: Path,
    app_settings: Optional[ProvisionSettings],
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Delete ``destination`` (if present) and copy ``source`` in its place.

    The old content is discarded, never merged.

    Raises:
        FileNotFoundError: The source does not exist. The destination is
            left as it was.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = _symbols(app_settings)

    if not source.is_file():
        raise FileNotFoundError(f"Template not found: {source}")

    if destination.exists() or destination.is_symlink():
        destination.unlink()
        log_step_message(
            f"Removed existing {destination}",
            "debug",
            logger_to_use,
            app_settings,
        )

    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(source, destination)
    log_step_message(
        f"{symbols.get('success', '✅')} Refreshed {destination} from {source}",
        "info",
        logger_to_use,
        app_settings,
    )


def cleanup_directory(
    directory_path: Path,
    app_settings: Optional[ProvisionSettings],
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Remove a directory and its contents.

    A missing directory is not an error. Removal failures are logged and
    do not propagate.

    Parameters:
        directory_path (Path): The directory to remove.
        app_settings (Optional[ProvisionSettings]): Settings providing log symbols.
        current_logger (Optional[logging.Logger]): Logger to use.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = _symbols(app_settings)

    log_step_message(
        f"Attempting to clean directory: {directory_path}",
        "debug",
        logger_to_use,
        app_settings,
    )
    if not directory_path.exists():
        log_step_message(
            f"{symbols.get('info', 'ℹ️')} Directory {directory_path} does not exist. No cleanup needed.",
            "info",
            logger_to_use,
            app_settings,
        )
        return

    if not directory_path.is_dir():
        log_step_message(
            f"{symbols.get('warning', '!')} Path {directory_path} exists but is not a directory.",
            "warning",
            logger_to_use,
            app_settings,
        )
        return

    try:
        shutil.rmtree(directory_path)
        log_step_message(
            f"{symbols.get('success', '✅')} Removed directory and its contents: {directory_path}",
            "info",
            logger_to_use,
            app_settings,
        )
    except OSError as e:
        log_step_message(
            f"{symbols.get('error', '❌')} Error removing directory {directory_path}: {e}",
            "error",
            logger_to_use,
            app_settings,
            exc_info=True,
        )

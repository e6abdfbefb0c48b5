# provisioner/steps/dependencies.py
# -*- coding: utf-8 -*-
"""
Dependency installation: composer packages and the optional theme build.
"""

import logging
from typing import Optional

from common.command_utils import log_step_message
from common.file_utils import cleanup_directory
from provisioner.config_models import ProvisionSettings
from provisioner.tools import ToolSet

module_logger = logging.getLogger(__name__)

NODE_MODULES_DIR = "node_modules"


def build_theme(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Build the configured theme's front-end assets.

    Nothing happens when no theme is configured or its directory is
    missing. After a build the theme's ``node_modules`` is removed.

    Returns:
        bool: True if the theme was built.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols

    theme_path = app_settings.theme_path
    if theme_path is None:
        log_step_message(
            f"{symbols.get('info', 'ℹ️')} No default theme configured. Skipping theme build.",
            "info",
            logger_to_use,
            app_settings,
        )
        return False
    if not theme_path.is_dir():
        log_step_message(
            f"{symbols.get('warning', '⚠️')} Theme directory {theme_path} not found. Skipping theme build.",
            "warning",
            logger_to_use,
            app_settings,
        )
        return False

    log_step_message(
        f"{symbols.get('package', '📦')} Building theme '{app_settings.default_theme}' in {theme_path}",
        "info",
        logger_to_use,
        app_settings,
    )
    tools.frontend.clean_install(theme_path)
    tools.frontend.run_script(app_settings.toolchain.theme_build_script, theme_path)
    cleanup_directory(theme_path / NODE_MODULES_DIR, app_settings, logger_to_use)
    return True


def install_dependencies(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Install composer packages, then build the theme if there is one."""
    logger_to_use = current_logger if current_logger else module_logger

    log_step_message(
        f"{app_settings.symbols.get('package', '📦')} Installing project dependencies.",
        "info",
        logger_to_use,
        app_settings,
    )
    tools.package_manager.install()
    build_theme(tools, app_settings, logger_to_use)

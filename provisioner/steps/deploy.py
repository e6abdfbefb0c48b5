# provisioner/steps/deploy.py
# -*- coding: utf-8 -*-
"""
Site deployment and the development-only admin account reset.
"""

import logging
from typing import Optional

from common.command_utils import log_step_message
from provisioner.config_models import ProvisionSettings
from provisioner.tools import ToolSet

module_logger = logging.getLogger(__name__)


def run_deploy(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Apply database updates, import configuration and rebuild caches."""
    logger_to_use = current_logger if current_logger else module_logger
    log_step_message(
        f"{app_settings.symbols.get('rocket', '🚀')} Running deploy routine.",
        "info",
        logger_to_use,
        app_settings,
    )
    tools.site_cli.deploy()


def reset_admin(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Set the admin account's password and unblock it."""
    logger_to_use = current_logger if current_logger else module_logger
    log_step_message(
        f"{app_settings.symbols.get('gear', '⚙️')} Resetting credentials for '{app_settings.admin_user}'.",
        "info",
        logger_to_use,
        app_settings,
    )
    tools.site_cli.user_password(app_settings.admin_user, app_settings.admin_password)
    tools.site_cli.user_unblock(app_settings.admin_user)

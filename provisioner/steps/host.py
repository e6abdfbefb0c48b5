# provisioner/steps/host.py
# -*- coding: utf-8 -*-
"""
Host-specific guidance printed at the end of a run.
"""

import logging
from typing import Optional

from common.command_utils import log_step_message
from common.system_utils import HOST_WSL, detect_host_variant
from provisioner.config_models import ProvisionSettings

module_logger = logging.getLogger(__name__)

WINDOWS_HOSTS_FILE = r"C:\Windows\System32\drivers\etc\hosts"


def host_is_wsl(app_settings: ProvisionSettings) -> bool:
    return detect_host_variant(app_settings) == HOST_WSL


def print_host_hints(
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Tell a WSL user how to reach the site from the Windows side."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    host = app_settings.virtual_host

    hint = (
        f"{symbols.get('info', 'ℹ️')} Running under WSL. To open the site from a Windows browser, "
        f"add this line to {WINDOWS_HOSTS_FILE} (as Administrator):\n\n"
        f"    127.0.0.1    {host}\n\n"
        f"Then browse to http://{host}/"
    )
    log_step_message(hint, "info", logger_to_use, app_settings)

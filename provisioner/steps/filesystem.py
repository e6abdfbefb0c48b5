# provisioner/steps/filesystem.py
# -*- coding: utf-8 -*-
"""
Filesystem steps: site directory permissions and settings artifacts.
"""

import logging
from typing import Optional

from common.command_utils import log_step_message
from common.file_utils import copy_if_absent, ensure_directory, replace_file
from provisioner.config_models import ProvisionSettings

module_logger = logging.getLogger(__name__)

SITE_DIR_MODE = 0o755
FILES_DIR_MODE = 0o775
FILES_DIR_NAME = "files"

DEFAULT_SETTINGS_TEMPLATE = "default.settings.php"
SETTINGS_FILE = "settings.php"
LOCAL_SETTINGS_TEMPLATE = "sites/example.settings.local.php"
LOCAL_SETTINGS_FILE = "settings.local.php"


def fix_permissions(
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Make sure the per-site directory exists and is writable where it must be.

    The site directory gets 0755 and its public ``files`` directory 0775 so
    the web server group can write uploads.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols

    site_path = app_settings.site_path
    log_step_message(
        f"{symbols.get('step', '➡️')} Fixing permissions under {site_path}",
        "info",
        logger_to_use,
        app_settings,
    )
    ensure_directory(site_path, SITE_DIR_MODE, app_settings, logger_to_use)
    ensure_directory(
        site_path / FILES_DIR_NAME, FILES_DIR_MODE, app_settings, logger_to_use
    )


def init_settings(
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Ensure the site's settings files exist.

    ``settings.php`` is copied from ``default.settings.php`` only when it is
    missing, so an existing file is never modified. In a development
    environment ``settings.local.php`` is deleted and copied afresh from
    ``<docroot>/sites/example.settings.local.php`` on every run.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    site_path = app_settings.site_path

    copy_if_absent(
        site_path / DEFAULT_SETTINGS_TEMPLATE,
        site_path / SETTINGS_FILE,
        app_settings,
        logger_to_use,
    )

    if not app_settings.is_development:
        log_step_message(
            f"{symbols.get('info', 'ℹ️')} Environment '{app_settings.site_env}' is not a development environment; "
            f"{LOCAL_SETTINGS_FILE} left as it is.",
            "info",
            logger_to_use,
            app_settings,
        )
        return

    replace_file(
        app_settings.docroot_path / LOCAL_SETTINGS_TEMPLATE,
        site_path / LOCAL_SETTINGS_FILE,
        app_settings,
        logger_to_use,
    )

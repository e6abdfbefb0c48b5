# provisioner/steps/services.py
# -*- coding: utf-8 -*-
"""
Backing service steps: start or recreate the compose services, then wait
for the database to accept connections.
"""

import logging
import shlex
from typing import Optional

from common.command_utils import log_step_message
from common.network_utils import port_is_open, wait_until
from provisioner.config_models import ProvisionSettings
from provisioner.tools import ToolSet

module_logger = logging.getLogger(__name__)


def services_already_running(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Whether the backing services are up.

    An explicit ``services_running`` setting wins; otherwise the container
    runtime is asked for its running services.
    """
    logger_to_use = current_logger if current_logger else module_logger
    if app_settings.services_running is not None:
        return app_settings.services_running

    running = tools.runtime.running_services()
    log_step_message(
        f"Running services reported by the container runtime: {', '.join(running) or 'none'}",
        "debug",
        logger_to_use,
        app_settings,
    )
    return bool(running)


def start_services(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Bring the backing services up.

    Running services are torn down together with their volumes and
    recreated; otherwise they are simply started. Exactly one of the two
    happens per run.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols

    if services_already_running(tools, app_settings, logger_to_use):
        log_step_message(
            f"{symbols.get('warning', '⚠️')} Services are already running. Recreating them (volumes are removed).",
            "warning",
            logger_to_use,
            app_settings,
        )
        tools.runtime.recreate()
    else:
        log_step_message(
            f"{symbols.get('rocket', '🚀')} Starting services.",
            "info",
            logger_to_use,
            app_settings,
        )
        tools.runtime.up()


def wait_for_database(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Block until the database service accepts connections.

    By default ``db_probe_command`` is run inside ``db_service`` through the
    container runtime, so the database port need not be published to the
    host. With ``readiness_check: tcp`` the host connects to
    ``db_host:db_port`` instead.

    Raises:
        ServiceNotReadyError: The service did not come up within
            ``services.readiness_timeout`` seconds.
    """
    logger_to_use = current_logger if current_logger else module_logger
    services = app_settings.services

    if services.readiness_check == "tcp":
        target = f"{services.db_host}:{services.db_port}"

        def check() -> bool:
            return port_is_open(services.db_host, services.db_port)
    else:
        target = f"service '{services.db_service}'"
        probe_args = shlex.split(services.db_probe_command)

        def check() -> bool:
            return tools.runtime.service_responds(services.db_service, probe_args)

    log_step_message(
        f"{app_settings.symbols.get('info', 'ℹ️')} Waiting up to {services.readiness_timeout:g}s for {target}",
        "info",
        logger_to_use,
        app_settings,
    )
    wait_until(
        check,
        target,
        timeout=services.readiness_timeout,
        interval=services.readiness_interval,
        app_settings=app_settings,
        current_logger=logger_to_use,
    )

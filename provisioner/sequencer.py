# provisioner/sequencer.py
# -*- coding: utf-8 -*-
"""
The provisioning sequencer.

Registers the nine provisioning steps, in their fixed order, with an
``Orchestrator`` and runs them fail-fast against one immutable settings
object.
"""

import logging
from typing import List, Optional, Tuple

from common.command_utils import log_step_message
from common.orchestrator import Orchestrator, RunResult, RunStatus, Step

from .config_models import ProvisionSettings
from .steps.database import import_database
from .steps.dependencies import install_dependencies
from .steps.deploy import reset_admin, run_deploy
from .steps.filesystem import fix_permissions, init_settings
from .steps.host import host_is_wsl, print_host_hints
from .steps.services import start_services, wait_for_database
from .tools import ToolSet

module_logger = logging.getLogger(__name__)

STEP_FIX_PERMISSIONS = "fix-permissions"
STEP_INIT_SETTINGS = "init-settings"
STEP_START_SERVICES = "start-services"
STEP_WAIT_FOR_DATABASE = "wait-for-database"
STEP_INSTALL_DEPENDENCIES = "install-dependencies"
STEP_IMPORT_DATABASE = "import-database"
STEP_DEPLOY = "deploy"
STEP_RESET_ADMIN = "reset-admin"
STEP_HOST_HINTS = "host-hints"

STEP_NAMES: List[str] = [
    STEP_FIX_PERMISSIONS,
    STEP_INIT_SETTINGS,
    STEP_START_SERVICES,
    STEP_WAIT_FOR_DATABASE,
    STEP_INSTALL_DEPENDENCIES,
    STEP_IMPORT_DATABASE,
    STEP_DEPLOY,
    STEP_RESET_ADMIN,
    STEP_HOST_HINTS,
]


class PreconditionError(Exception):
    """Required configuration is missing; nothing has been done yet."""


def _is_development(app_settings: ProvisionSettings) -> bool:
    return app_settings.is_development


class ProvisioningSequencer:
    """Runs the provisioning steps for one project."""

    def __init__(
        self,
        app_settings: ProvisionSettings,
        tools: Optional[ToolSet] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            app_settings: The effective, frozen settings for this run.
            tools: Tool adapters to use. Built from the settings when omitted.
            logger: Optional logger instance.
        """
        self.app_settings = app_settings
        self.logger = logger or module_logger
        self.tools = tools if tools is not None else ToolSet.from_settings(
            app_settings, self.logger
        )
        self.orchestrator = Orchestrator(app_settings, self.logger)
        self._register_steps()

    def _register_steps(self) -> None:
        tools = self.tools
        add = self.orchestrator.add_step

        add(STEP_FIX_PERMISSIONS, fix_permissions)
        add(STEP_INIT_SETTINGS, init_settings)
        add(STEP_START_SERVICES, start_services, args=[tools])
        add(STEP_WAIT_FOR_DATABASE, wait_for_database, args=[tools])
        add(STEP_INSTALL_DEPENDENCIES, install_dependencies, args=[tools])
        add(STEP_IMPORT_DATABASE, import_database, args=[tools])
        add(STEP_DEPLOY, run_deploy, args=[tools])
        add(
            STEP_RESET_ADMIN,
            reset_admin,
            args=[tools],
            when=_is_development,
            skip_notice=(
                f"environment '{self.app_settings.site_env}' is not a development "
                f"environment; the admin account is left unchanged."
            ),
        )
        add(STEP_HOST_HINTS, print_host_hints, when=host_is_wsl)

    @property
    def steps(self) -> List[Step]:
        return self.orchestrator.steps

    @property
    def state(self) -> RunStatus:
        return self.orchestrator.state

    @property
    def current_step(self) -> Optional[int]:
        return self.orchestrator.current_step

    def check_preconditions(self) -> None:
        """
        Verify the configuration a run cannot start without.

        Raises:
            PreconditionError: The project root is not set or is not an existing
                directory, or a snapshot download is expected but no snapshot
                URL is configured.
        """
        project_root = self.app_settings.project_root
        if project_root is None:
            raise PreconditionError(
                "PROJECT_ROOT is not set. Set it in the environment, provision.yaml or with --project-root."
            )
        if not project_root.is_dir():
            raise PreconditionError(f"PROJECT_ROOT {project_root} is not an existing directory.")
        if not self.app_settings.skip_dump_fetch and not self.app_settings.dump.url:
            raise PreconditionError(
                "DUMP_URL is not set. Configure the snapshot source or skip the download with --skip-dump-fetch."
            )

    def plan(self) -> List[Tuple[Step, bool]]:
        return self.orchestrator.plan()

    def run(self) -> RunResult:
        """
        Execute the steps in order, stopping at the first failure.

        Raises:
            PreconditionError: Before any step runs.
        """
        self.check_preconditions()
        symbols = self.app_settings.symbols

        log_step_message(
            f"{symbols.get('rocket', '🚀')} Provisioning {self.app_settings.project_root} "
            f"(environment: {self.app_settings.site_env})",
            "info",
            self.logger,
            self.app_settings,
        )
        result = self.orchestrator.run()

        if result.succeeded:
            log_step_message(
                f"{symbols.get('sparkles', '✨')} Provisioning finished: "
                f"{len(result.completed)} step(s) completed, {len(result.skipped)} skipped.",
                "info",
                self.logger,
                self.app_settings,
            )
        else:
            log_step_message(
                f"{symbols.get('error', '❌')} Provisioning failed at step {result.failed_step} "
                f"'{result.failed_name}' (exit code {result.exit_code}).",
                "error",
                self.logger,
                self.app_settings,
            )
        return result


def run(
    app_settings: ProvisionSettings,
    tools: Optional[ToolSet] = None,
    logger: Optional[logging.Logger] = None,
) -> RunResult:
    """Provision the project described by ``app_settings``."""
    return ProvisioningSequencer(app_settings, tools, logger).run()

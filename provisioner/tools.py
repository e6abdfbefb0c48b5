# provisioner/tools.py
# -*- coding: utf-8 -*-
"""
Adapters for the external command-line tools the provisioner delegates to.

Every tool is reached through ``ExternalTool.run``, which shells out via
``common.command_utils.run_command`` and raises
``subprocess.CalledProcessError`` on a non-zero exit. Steps only ever talk
to a ``ToolSet``, so tests can hand the sequencer fakes instead.
"""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from common.command_utils import run_command

from .config_models import ProvisionSettings

PathLike = Union[str, Path]


class ExternalTool(ABC):
    """
    Base class for all delegated tools.

    Subclasses provide the command prefix; ``run`` appends the arguments
    and executes the result.
    """

    def __init__(
        self,
        app_settings: ProvisionSettings,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the tool.

        Args:
            app_settings: The provisioning settings.
            logger: Optional logger instance. If not provided, a new logger will be created.
        """
        self.app_settings = app_settings
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def command_prefix(self) -> List[str]:
        """
        Get the command every invocation of this tool starts with.

        Returns:
            The command as a list of arguments.
        """
        pass

    def secrets(self) -> List[str]:
        """Values that must never appear in log output."""
        return []

    def default_cwd(self) -> Optional[Path]:
        return None

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[PathLike] = None,
        capture_output: bool = False,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """
        Run the tool with the given arguments.

        Raises:
            subprocess.CalledProcessError: The tool exited non-zero and check is True.
        """
        working_dir = cwd if cwd is not None else self.default_cwd()
        return run_command(
            self.command_prefix() + list(args),
            self.app_settings,
            check=check,
            capture_output=capture_output,
            current_logger=self.logger,
            cwd=str(working_dir) if working_dir is not None else None,
            redact=self.secrets(),
        )


class ContainerRuntime(ExternalTool):
    """``docker compose`` (or a compatible runtime) in the project root."""

    def command_prefix(self) -> List[str]:
        services = self.app_settings.services
        prefix = shlex.split(services.command) + ["compose"]
        if services.file:
            compose_file = Path(services.file)
            if not compose_file.is_absolute() and self.app_settings.project_root:
                compose_file = self.app_settings.project_root / compose_file
            prefix += ["-f", str(compose_file)]
        return prefix

    def default_cwd(self) -> Optional[Path]:
        return self.app_settings.project_root

    def up(self) -> None:
        """Start the services without touching existing volumes."""
        self.run(["up", "-d"])

    def recreate(self) -> None:
        """Destroy the services and their volumes, then start them afresh."""
        self.run(["down", "--volumes"])
        self.run(["up", "-d", "--force-recreate"])

    def exec_prefix(self, service: str, workdir: Optional[str] = None) -> List[str]:
        # -T: no TTY, output is captured by the provisioner's logs.
        prefix = self.command_prefix() + ["exec", "-T"]
        if workdir:
            prefix += ["-w", workdir]
        return prefix + [service]

    def exec(
        self,
        service: str,
        args: Sequence[str],
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:
        return self.run(["exec", "-T", service] + list(args), capture_output=capture_output)

    def service_responds(self, service: str, args: Sequence[str]) -> bool:
        """
        Whether ``args`` exits 0 inside ``service``.

        A non-zero exit (service still starting, or not up at all) is an
        answer, not an error.
        """
        result = self.run(
            ["exec", "-T", service] + list(args), capture_output=True, check=False
        )
        return result.returncode == 0

    def running_services(self) -> List[str]:
        """Names of the compose services currently running."""
        result = self.run(
            ["ps", "--services", "--status", "running"], capture_output=True
        )
        output = result.stdout or ""
        return [line.strip() for line in output.splitlines() if line.strip()]


class _AppContainerTool(ExternalTool):
    """A tool executed inside the application service container."""

    def __init__(
        self,
        app_settings: ProvisionSettings,
        runtime: ContainerRuntime,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(app_settings, logger)
        self.runtime = runtime

    @abstractmethod
    def tool_command(self) -> str:
        """The tool's own command, e.g. ``composer``."""
        pass

    def default_cwd(self) -> Optional[Path]:
        return self.runtime.default_cwd()

    def command_prefix(self) -> List[str]:
        services = self.app_settings.services
        return self.runtime.exec_prefix(
            services.app_service, services.app_project_dir
        ) + shlex.split(self.tool_command())


class PackageManager(_AppContainerTool):
    """``composer`` inside the application container."""

    def tool_command(self) -> str:
        return self.app_settings.toolchain.composer_command

    def install(self) -> None:
        self.run(["install"])


class SiteCli(_AppContainerTool):
    """``drush`` inside the application container: database client and deployment tool."""

    def tool_command(self) -> str:
        return self.app_settings.toolchain.drush_command

    def command_prefix(self) -> List[str]:
        return super().command_prefix() + [
            "--yes",
            f"--uri={self.app_settings.virtual_host}",
        ]

    def secrets(self) -> List[str]:
        return [self.app_settings.admin_password]

    def sql_drop(self) -> None:
        self.run(["sql:drop"])

    def sql_import(self, snapshot: PathLike) -> None:
        self.run(["sql:query", f"--file={snapshot}"])

    def deploy(self) -> None:
        self.run(["deploy"])

    def user_password(self, user: str, password: str) -> None:
        self.run(["user:password", user, password])

    def user_unblock(self, user: str) -> None:
        self.run(["user:unblock", user])


class FrontendToolchain(ExternalTool):
    """``npm`` on the host, run inside a theme directory."""

    def command_prefix(self) -> List[str]:
        return shlex.split(self.app_settings.toolchain.npm_command)

    def clean_install(self, directory: PathLike) -> None:
        self.run(["ci"], cwd=directory)

    def run_script(self, script: str, directory: PathLike) -> None:
        self.run(["run", script], cwd=directory)


@dataclass
class ToolSet:
    """The adapters one provisioning run works with."""
    runtime: ContainerRuntime
    package_manager: PackageManager
    site_cli: SiteCli
    frontend: FrontendToolchain

    @classmethod
    def from_settings(
        cls,
        app_settings: ProvisionSettings,
        logger: Optional[logging.Logger] = None,
    ) -> "ToolSet":
        runtime = ContainerRuntime(app_settings, logger)
        return cls(
            runtime=runtime,
            package_manager=PackageManager(app_settings, runtime, logger),
            site_cli=SiteCli(app_settings, runtime, logger),
            frontend=FrontendToolchain(app_settings, logger),
        )

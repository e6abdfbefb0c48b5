# provisioner/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for provisioning configuration.

This module defines the structured settings consumed by the provisioning
sequencer, including defaults, type annotations, and descriptions. Values
are read from the environment by Pydantic's BaseSettings and the resulting
objects are frozen: the sequencer receives one immutable settings object
and no step reads the environment on its own.
"""

from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Default Static Values (can be overridden by config file/env/cli) ---
DOCROOT_DEFAULT: str = "web"
SITE_ENV_DEFAULT: str = "dev"
DEVELOPMENT_ENVS_DEFAULT: List[str] = ["dev", "development", "local"]
VIRTUAL_HOST_DEFAULT: str = "localhost"
ADMIN_USER_DEFAULT: str = "admin"
ADMIN_PASSWORD_DEFAULT: str = "admin"
THEME_BASE_DIR_DEFAULT: str = "themes/custom"
SITE_DIR_DEFAULT: str = "sites/default"
LOG_PREFIX_DEFAULT: str = "[PROVISION]"

DUMP_PATH_DEFAULT: str = "dump/database.sql.gz"
DUMP_TIMEOUT_DEFAULT: int = 300

CONTAINER_RUNTIME_COMMAND_DEFAULT: str = "docker"
APP_SERVICE_DEFAULT: str = "php"
DB_SERVICE_DEFAULT: str = "db"
DB_HOST_DEFAULT: str = "127.0.0.1"
DB_PORT_DEFAULT: int = 3306
READINESS_TIMEOUT_DEFAULT: float = 60.0
READINESS_INTERVAL_DEFAULT: float = 2.0
READINESS_CHECK_DEFAULT: str = "container"
DB_PROBE_COMMAND_DEFAULT: str = "mysqladmin ping --silent"

COMPOSER_COMMAND_DEFAULT: str = "composer"
DRUSH_COMMAND_DEFAULT: str = "vendor/bin/drush"
NPM_COMMAND_DEFAULT: str = "npm"
THEME_BUILD_SCRIPT_DEFAULT: str = "build"

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
    "skip": "⏭️",
}


class DumpSettings(BaseSettings):
    """Remote database snapshot source and local copy."""
    model_config = SettingsConfigDict(
        env_prefix='DUMP_',
        extra='ignore',
        frozen=True,
        env_ignore_empty=True,
    )

    url: Optional[str] = Field(default=None, description="URL of the remote database snapshot.")
    user: Optional[str] = Field(default=None, description="Username for the snapshot source.")
    password: Optional[str] = Field(default=None, description="Password for the snapshot source.", exclude=True)
    path: str = Field(default=DUMP_PATH_DEFAULT,
                      description="Local snapshot path, relative to the project root unless absolute.")
    timeout: int = Field(default=DUMP_TIMEOUT_DEFAULT, description="HTTP timeout in seconds for the snapshot download.")


class ServiceSettings(BaseSettings):
    """Container runtime and backing service settings."""
    model_config = SettingsConfigDict(
        env_prefix='COMPOSE_',
        extra='ignore',
        frozen=True,
        env_ignore_empty=True,
    )

    command: str = Field(default=CONTAINER_RUNTIME_COMMAND_DEFAULT,
                         description="Container runtime CLI (e.g., docker, podman).")
    file: Optional[str] = Field(default=None, description="Compose file, relative to the project root unless absolute.")
    app_service: str = Field(default=APP_SERVICE_DEFAULT, description="Service that runs composer and drush.")
    app_project_dir: Optional[str] = Field(
        default=None,
        description="Where the project root is mounted in the app container. Unset means the container's "
                    "own working directory is that mount.",
    )
    db_service: str = Field(default=DB_SERVICE_DEFAULT, description="Primary data service.")
    db_host: str = Field(default=DB_HOST_DEFAULT, description="Host the data service is published on (tcp readiness check).")
    db_port: int = Field(default=DB_PORT_DEFAULT, description="Port the data service is published on (tcp readiness check).")
    readiness_timeout: float = Field(default=READINESS_TIMEOUT_DEFAULT,
                                     description="Seconds to wait for the data service to accept connections.")
    readiness_interval: float = Field(default=READINESS_INTERVAL_DEFAULT,
                                      description="Seconds between readiness probes.")
    readiness_check: Literal["container", "tcp"] = Field(
        default=READINESS_CHECK_DEFAULT,
        description="'container' runs db_probe_command inside db_service; 'tcp' connects to db_host:db_port.",
    )
    db_probe_command: str = Field(default=DB_PROBE_COMMAND_DEFAULT,
                                  description="Command that exits 0 once the data service accepts connections.")


class ToolchainSettings(BaseSettings):
    """Commands for the delegated tools."""
    model_config = SettingsConfigDict(
        env_prefix='TOOLCHAIN_',
        extra='ignore',
        frozen=True,
        env_ignore_empty=True,
    )

    composer_command: str = Field(default=COMPOSER_COMMAND_DEFAULT, description="Package manager command.")
    drush_command: str = Field(default=DRUSH_COMMAND_DEFAULT, description="Site CLI command (database + deploy).")
    npm_command: str = Field(default=NPM_COMMAND_DEFAULT, description="Front-end toolchain command.")
    theme_build_script: str = Field(default=THEME_BUILD_SCRIPT_DEFAULT,
                                    description="npm script that builds the theme assets.")


class ProvisionSettings(BaseSettings):
    """Main provisioning settings."""
    model_config = SettingsConfigDict(extra='ignore', frozen=True, env_ignore_empty=True)

    project_root: Optional[Path] = Field(default=None, description="Target project root (required to run).")
    docroot: str = Field(default=DOCROOT_DEFAULT, description="Document root, relative to the project root.")
    site_env: str = Field(default=SITE_ENV_DEFAULT, description="Site environment marker.")
    development_envs: List[str] = Field(default_factory=lambda: list(DEVELOPMENT_ENVS_DEFAULT),
                                        description="Environment markers treated as development.")
    virtual_host: str = Field(default=VIRTUAL_HOST_DEFAULT, description="Virtual host name of the site.")
    admin_user: str = Field(default=ADMIN_USER_DEFAULT, description="Administrative account name.")
    admin_password: str = Field(default=ADMIN_PASSWORD_DEFAULT, description="Administrative password.",
                                exclude=True)
    default_theme: str = Field(default="", description="Theme to build; empty means no theme.")
    theme_base_dir: str = Field(default=THEME_BASE_DIR_DEFAULT, description="Theme parent dir, relative to docroot.")
    site_dir: str = Field(default=SITE_DIR_DEFAULT, description="Per-site directory, relative to docroot.")
    skip_dump_fetch: bool = Field(default=False, description="Skip downloading a fresh database snapshot.")
    services_running: Optional[bool] = Field(
        default=None,
        description="Whether backing services are already running. None asks the container runtime.",
    )
    log_prefix: str = Field(default=LOG_PREFIX_DEFAULT, description="Prefix for console log messages.")

    dump: DumpSettings = Field(default_factory=DumpSettings)
    services: ServiceSettings = Field(default_factory=ServiceSettings)
    toolchain: ToolchainSettings = Field(default_factory=ToolchainSettings)

    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))

    @field_validator("project_root", mode="before")
    @classmethod
    def blank_project_root_is_unset(cls, v):
        """An empty or whitespace-only root means no root, not the current directory."""
        if v is None or (isinstance(v, str) and v.strip() == ""):
            return None
        return v

    @property
    def is_development(self) -> bool:
        return self.site_env.strip().lower() in {
            env.strip().lower() for env in self.development_envs
        }

    @property
    def docroot_path(self) -> Path:
        if self.project_root is None:
            raise ValueError("project_root is not configured")
        return self.project_root / self.docroot

    @property
    def site_path(self) -> Path:
        return self.docroot_path / self.site_dir

    @property
    def theme_path(self) -> Optional[Path]:
        if not self.default_theme.strip():
            return None
        return self.docroot_path / self.theme_base_dir / self.default_theme.strip()

    @property
    def dump_path(self) -> Path:
        path = Path(self.dump.path)
        if path.is_absolute():
            return path
        if self.project_root is None:
            raise ValueError("project_root is not configured")
        return self.project_root / path

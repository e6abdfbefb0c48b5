# tests/conftest.py
import logging
from unittest.mock import MagicMock

import pytest

from provisioner.config_models import ProvisionSettings
from provisioner.tools import ToolSet

# Every variable the settings models read; cleared so the host environment
# cannot leak into a test.
SETTINGS_ENV_VARS = [
    "PROJECT_ROOT",
    "DOCROOT",
    "SITE_ENV",
    "DEVELOPMENT_ENVS",
    "VIRTUAL_HOST",
    "ADMIN_USER",
    "ADMIN_PASSWORD",
    "DEFAULT_THEME",
    "THEME_BASE_DIR",
    "SITE_DIR",
    "SKIP_DUMP_FETCH",
    "SERVICES_RUNNING",
    "LOG_PREFIX",
    "SYMBOLS",
    "DUMP",
    "SERVICES",
    "TOOLCHAIN",
    "DUMP_URL",
    "DUMP_USER",
    "DUMP_PASSWORD",
    "DUMP_PATH",
    "DUMP_TIMEOUT",
    "COMPOSE_COMMAND",
    "COMPOSE_FILE",
    "COMPOSE_APP_SERVICE",
    "COMPOSE_APP_PROJECT_DIR",
    "COMPOSE_DB_SERVICE",
    "COMPOSE_DB_HOST",
    "COMPOSE_DB_PORT",
    "COMPOSE_READINESS_TIMEOUT",
    "COMPOSE_READINESS_INTERVAL",
    "COMPOSE_READINESS_CHECK",
    "COMPOSE_DB_PROBE_COMMAND",
    "TOOLCHAIN_COMPOSER_COMMAND",
    "TOOLCHAIN_DRUSH_COMMAND",
    "TOOLCHAIN_NPM_COMMAND",
    "TOOLCHAIN_THEME_BUILD_SCRIPT",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path_factory):
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # No stray provision.yaml from the developer's working directory.
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))


@pytest.fixture
def mock_logger():
    """Fixture to create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def project_root(tmp_path):
    """A minimal project tree with settings templates and a local snapshot."""
    root = tmp_path / "proj"
    sites = root / "web" / "sites"
    (sites / "default").mkdir(parents=True)
    (sites / "default" / "default.settings.php").write_text("<?php // default\n")
    (sites / "example.settings.local.php").write_text("<?php // local dev\n")
    (root / "dump").mkdir()
    (root / "dump" / "database.sql.gz").write_bytes(b"old snapshot")
    return root


@pytest.fixture
def make_settings(project_root):
    """Build ProvisionSettings for the test project, with keyword overrides."""

    def _make(**overrides):
        values = {
            "project_root": project_root,
            "site_env": "dev",
            "services_running": False,
            "dump": {
                "url": "https://backups.example.com/site.sql.gz",
                "user": "reader",
                "password": "s3cret",
            },
            "services": {"readiness_timeout": 1, "readiness_interval": 0.1},
        }
        values.update(overrides)
        return ProvisionSettings(**values)

    return _make


@pytest.fixture
def tool_calls():
    """Parent mock recording calls on all fake tools in order."""
    return MagicMock()


@pytest.fixture
def fake_tools(tool_calls):
    return ToolSet(
        runtime=tool_calls.runtime,
        package_manager=tool_calls.package_manager,
        site_cli=tool_calls.site_cli,
        frontend=tool_calls.frontend,
    )

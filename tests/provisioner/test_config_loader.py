from pathlib import Path

import pytest

from provisioner.config_loader import _deep_update, load_provision_settings
from provisioner.config_models import ProvisionSettings


def test_deep_update_merges_nested_and_ignores_none():
    source = {"a": 1, "dump": {"url": "x", "path": "p"}, "keep": "me"}
    overrides = {"a": 2, "dump": {"url": "y"}, "keep": None, "new": None}

    result = _deep_update(source, overrides)

    assert result == {
        "a": 2,
        "dump": {"url": "y", "path": "p"},
        "keep": "me",
        "new": None,
    }


def test_defaults_without_file_or_env(mock_logger):
    settings = load_provision_settings(current_logger=mock_logger)

    assert isinstance(settings, ProvisionSettings)
    assert settings.project_root is None
    assert settings.site_env == "dev"
    assert settings.services.db_port == 3306
    assert settings.services.readiness_timeout == 60
    assert settings.toolchain.drush_command == "vendor/bin/drush"


def test_environment_is_read(monkeypatch, mock_logger):
    monkeypatch.setenv("PROJECT_ROOT", "/proj")
    monkeypatch.setenv("SITE_ENV", "prod")
    monkeypatch.setenv("ADMIN_PASSWORD", "from-env")
    monkeypatch.setenv("DUMP_URL", "https://example.com/dump.sql.gz")
    monkeypatch.setenv("DUMP_PASSWORD", "dump-secret")
    monkeypatch.setenv("COMPOSE_DB_PORT", "3307")

    settings = load_provision_settings(current_logger=mock_logger)

    assert settings.project_root == Path("/proj")
    assert settings.site_env == "prod"
    assert settings.admin_password == "from-env"
    assert settings.dump.url == "https://example.com/dump.sql.gz"
    assert settings.dump.password == "dump-secret"
    assert settings.services.db_port == 3307


def test_yaml_overrides_environment(tmp_path, monkeypatch, mock_logger):
    monkeypatch.setenv("SITE_ENV", "prod")
    monkeypatch.setenv("DUMP_USER", "env-user")
    config = tmp_path / "provision.yaml"
    config.write_text(
        "site_env: staging\n"
        "default_theme: olivero_sub\n"
        "dump:\n"
        "  url: https://yaml.example.com/db.sql.gz\n"
    )

    settings = load_provision_settings(
        config_file_path=config, current_logger=mock_logger
    )

    assert settings.site_env == "staging"
    assert settings.default_theme == "olivero_sub"
    assert settings.dump.url == "https://yaml.example.com/db.sql.gz"
    # Untouched nested keys survive the merge.
    assert settings.dump.user == "env-user"


def test_default_file_is_read_from_working_directory(tmp_path, monkeypatch, mock_logger):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "provision.yaml").write_text("virtual_host: site.localhost\n")

    settings = load_provision_settings(current_logger=mock_logger)

    assert settings.virtual_host == "site.localhost"


def test_cli_overrides_yaml(tmp_path, mock_logger):
    config = tmp_path / "provision.yaml"
    config.write_text("site_env: staging\nskip_dump_fetch: false\n")

    settings = load_provision_settings(
        cli_overrides={
            "site_env": "dev",
            "project_root": str(tmp_path),
            "skip_dump_fetch": True,
            "services_running": None,
            "compose_file": "docker-compose.dev.yml",
            "unrelated": "ignored",
        },
        config_file_path=config,
        current_logger=mock_logger,
    )

    assert settings.site_env == "dev"
    assert settings.project_root == tmp_path
    assert settings.skip_dump_fetch is True
    assert settings.services_running is None
    assert settings.services.file == "docker-compose.dev.yml"


def test_invalid_yaml_is_ignored(tmp_path, mock_logger):
    config = tmp_path / "provision.yaml"
    config.write_text("site_env: [unclosed\n")

    settings = load_provision_settings(
        config_file_path=config, current_logger=mock_logger
    )

    assert settings.site_env == "dev"
    mock_logger.warning.assert_called_once()
    assert "Could not parse YAML" in mock_logger.warning.call_args[0][0]


def test_non_mapping_yaml_is_ignored(tmp_path, mock_logger):
    config = tmp_path / "provision.yaml"
    config.write_text("- just\n- a list\n")

    load_provision_settings(config_file_path=config, current_logger=mock_logger)

    assert "does not contain a valid YAML dictionary" in mock_logger.warning.call_args[0][0]


def test_validation_error_exits(tmp_path, mock_logger):
    config = tmp_path / "provision.yaml"
    config.write_text("services:\n  db_port: not-a-port\n")

    with pytest.raises(SystemExit) as excinfo:
        load_provision_settings(config_file_path=config, current_logger=mock_logger)

    assert "Configuration error" in str(excinfo.value.code)
    mock_logger.error.assert_called_once()


def test_blank_project_root_in_environment_is_unset(monkeypatch, mock_logger):
    monkeypatch.setenv("PROJECT_ROOT", "")
    monkeypatch.setenv("COMPOSE_DB_PORT", "")

    settings = load_provision_settings(current_logger=mock_logger)

    assert settings.project_root is None
    assert settings.services.db_port == 3306


def test_whitespace_project_root_override_is_unset(mock_logger):
    settings = load_provision_settings(
        cli_overrides={"project_root": "   "}, current_logger=mock_logger
    )

    assert settings.project_root is None

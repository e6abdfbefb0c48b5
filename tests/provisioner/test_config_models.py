from pathlib import Path

import pytest
from pydantic import ValidationError

from provisioner.config_models import ProvisionSettings


@pytest.mark.parametrize(
    "site_env, expected",
    [("dev", True), ("Development", True), (" local ", True), ("prod", False), ("", False)],
)
def test_is_development(site_env, expected):
    assert ProvisionSettings(site_env=site_env).is_development is expected


def test_custom_development_envs():
    settings = ProvisionSettings(site_env="sandbox", development_envs=["sandbox"])

    assert settings.is_development is True


def test_derived_paths():
    settings = ProvisionSettings(
        project_root=Path("/proj"),
        docroot="docroot",
        default_theme="booster",
        dump={"path": "backups/db.sql.gz"},
    )

    assert settings.docroot_path == Path("/proj/docroot")
    assert settings.site_path == Path("/proj/docroot/sites/default")
    assert settings.theme_path == Path("/proj/docroot/themes/custom/booster")
    assert settings.dump_path == Path("/proj/backups/db.sql.gz")


def test_absolute_dump_path_is_kept():
    settings = ProvisionSettings(dump={"path": "/var/backups/db.sql.gz"})

    assert settings.dump_path == Path("/var/backups/db.sql.gz")


def test_no_theme_means_no_theme_path():
    settings = ProvisionSettings(project_root=Path("/proj"), default_theme="  ")

    assert settings.theme_path is None


def test_paths_need_project_root():
    with pytest.raises(ValueError):
        ProvisionSettings().site_path


def test_settings_are_frozen():
    settings = ProvisionSettings()

    with pytest.raises(ValidationError):
        settings.site_env = "prod"


def test_passwords_are_excluded_from_dumps():
    settings = ProvisionSettings(admin_password="pw", dump={"password": "dpw"})

    dumped = settings.model_dump()

    assert "admin_password" not in dumped
    assert "password" not in dumped["dump"]


@pytest.mark.parametrize("blank", ["", "   ", "\t"])
def test_blank_project_root_is_unset(blank):
    assert ProvisionSettings(project_root=blank).project_root is None


def test_readiness_defaults_probe_inside_db_service():
    services = ProvisionSettings().services

    assert services.readiness_check == "container"
    assert services.db_probe_command == "mysqladmin ping --silent"
    assert services.app_project_dir is None


def test_unknown_readiness_check_is_rejected():
    with pytest.raises(ValidationError):
        ProvisionSettings(services={"readiness_check": "ping"})

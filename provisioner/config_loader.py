# provisioner/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the provisioner.

Handles loading settings from Pydantic model defaults, environment
variables, a YAML file and command-line options, applying this order of
precedence (lowest first):
1. Pydantic Model Defaults
2. Environment Variables (via Pydantic's BaseSettings)
3. YAML Configuration File
4. Command-Line Options
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .config_models import ProvisionSettings

module_logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "provision.yaml"

# CLI option name -> dotted settings path.
CLI_OPTION_MAP: Dict[str, str] = {
    "project_root": "project_root",
    "site_env": "site_env",
    "skip_dump_fetch": "skip_dump_fetch",
    "services_running": "services_running",
    "log_prefix": "log_prefix",
    "default_theme": "default_theme",
    "dump_url": "dump.url",
    "compose_file": "services.file",
}


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively update ``source`` with values from ``overrides``.

    Nested dictionaries are merged key by key. A ``None`` override never
    replaces an existing value.

    Parameters:
        source: The dictionary to update in place.
        overrides: Values to apply on top of ``source``.

    Returns:
        Dict[str, Any]: The updated ``source``.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def _nest_cli_overrides(cli_overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Turn flat CLI option values into a nested settings dictionary."""
    nested: Dict[str, Any] = {}
    for option, value in cli_overrides.items():
        if value is None or option not in CLI_OPTION_MAP:
            continue
        target = nested
        *parents, leaf = CLI_OPTION_MAP[option].split(".")
        for parent in parents:
            target = target.setdefault(parent, {})
        target[leaf] = value
    return nested


def _read_yaml_file(
    yaml_config_path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.info(
            f"Configuration file '{yaml_config_path}' not found. Using defaults, environment variables, and CLI options."
        )
        return {}

    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data and isinstance(yaml_data, dict):
        logger_to_use.info(f"Loaded configuration from {yaml_config_path}")
        return yaml_data
    if yaml_data is not None:
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
    return {}


def load_provision_settings(
    cli_overrides: Optional[Dict[str, Any]] = None,
    config_file_path: Union[str, Path, None] = None,
    current_logger: Optional[logging.Logger] = None,
) -> ProvisionSettings:
    """
    Build the effective ProvisionSettings.

    Args:
        cli_overrides: Option values from the command line; ``None`` values
            mean "not given" and leave lower layers in place.
        config_file_path: YAML file to read. Defaults to ``provision.yaml``
            in the current working directory.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        ProvisionSettings: The fully resolved, frozen configuration.

    Raises:
        SystemExit: The merged values fail validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    # Model defaults < environment variables.
    settings_after_env_and_defaults = ProvisionSettings()
    current_values_dict = settings_after_env_and_defaults.model_dump(
        exclude_defaults=False
    )
    # Secrets are excluded from dumps; carry them over explicitly.
    current_values_dict["admin_password"] = (
        settings_after_env_and_defaults.admin_password
    )
    current_values_dict["dump"]["password"] = (
        settings_after_env_and_defaults.dump.password
    )

    yaml_config_path = Path(config_file_path or DEFAULT_CONFIG_FILE)
    if not yaml_config_path.is_absolute():
        yaml_config_path = Path.cwd() / yaml_config_path
    current_values_dict = _deep_update(
        current_values_dict, _read_yaml_file(yaml_config_path, logger_to_use)
    )

    if cli_overrides:
        current_values_dict = _deep_update(
            current_values_dict, _nest_cli_overrides(cli_overrides)
        )

    try:
        final_settings = ProvisionSettings(**current_values_dict)
    except Exception as e:  # Catch Pydantic validation errors etc.
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(f"Configuration error: {e}") from e

    logger_to_use.info("Successfully loaded and validated provisioning settings")
    return final_settings

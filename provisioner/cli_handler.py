# provisioner/cli_handler.py
# -*- coding: utf-8 -*-
"""
Text rendering for the informational CLI commands: the effective
configuration, the step plan and the host tool report.
"""

from typing import List, Optional, Tuple

from common.command_utils import command_exists
from common.orchestrator import Step

from .config_models import ADMIN_PASSWORD_DEFAULT, ProvisionSettings


def _password_display(value: Optional[str], default: Optional[str] = None) -> str:
    if not value:
        return "[NOT SET or EMPTY]"
    if default is not None and value == default:
        return "[DEFAULT - Potentially Insecure!]"
    return "[FROM CONFIGURATION (ENV/YAML/CLI)]"


def format_configuration(app_config: ProvisionSettings) -> str:
    """
    Render the effective configuration values. Passwords are never shown.

    Parameters:
        app_config (ProvisionSettings): The resolved settings.

    Returns:
        str: Multi-line, human-readable configuration listing.
    """
    symbols = app_config.symbols
    services = app_config.services
    toolchain = app_config.toolchain
    dump = app_config.dump

    config_text = f"{symbols.get('info', 'ℹ️')} Current effective configuration values (CLI > YAML > ENV > Defaults):\n\n"
    config_text += f"  Project Root:                  {app_config.project_root or '[NOT SET]'}\n"
    config_text += f"  Docroot:                       {app_config.docroot}\n"
    config_text += f"  Site Directory:                {app_config.site_dir}\n"
    config_text += f"  Site Environment:              {app_config.site_env} ({'development' if app_config.is_development else 'non-development'})\n"
    config_text += f"  Virtual Host:                  {app_config.virtual_host}\n"
    config_text += f"  Admin User:                    {app_config.admin_user}\n"
    config_text += f"  Admin Password:                {_password_display(app_config.admin_password, ADMIN_PASSWORD_DEFAULT)}\n"
    config_text += f"  Default Theme:                 {app_config.default_theme or '[NONE]'}\n"
    config_text += f"  Theme Base Directory:          {app_config.theme_base_dir}\n"
    config_text += f"  Skip Snapshot Download:        {app_config.skip_dump_fetch}\n"
    services_running = (
        "[ASK CONTAINER RUNTIME]"
        if app_config.services_running is None
        else app_config.services_running
    )
    config_text += f"  Services Running:              {services_running}\n"
    config_text += f"  Log Prefix:                    {app_config.log_prefix}\n\n"

    config_text += "  Database Snapshot (dump.*):\n"
    config_text += f"    URL:                         {dump.url or '[NOT SET]'}\n"
    config_text += f"    User:                        {dump.user or '[NOT SET]'}\n"
    config_text += f"    Password:                    {_password_display(dump.password)}\n"
    config_text += f"    Local Path:                  {dump.path}\n"
    config_text += f"    Timeout (s):                 {dump.timeout}\n\n"

    config_text += "  Services (services.*):\n"
    config_text += f"    Runtime Command:             {services.command}\n"
    config_text += f"    Compose File:                {services.file or '[DEFAULT]'}\n"
    config_text += f"    App Service:                 {services.app_service}\n"
    config_text += f"    App Project Dir:             {services.app_project_dir or '[CONTAINER WORKDIR]'}\n"
    config_text += f"    Database Service:            {services.db_service}\n"
    config_text += f"    Readiness Check:             {services.readiness_check}\n"
    config_text += f"    Database Probe Command:      {services.db_probe_command}\n"
    config_text += f"    Database Endpoint (tcp):     {services.db_host}:{services.db_port}\n"
    config_text += f"    Readiness Timeout (s):       {services.readiness_timeout:g}\n"
    config_text += f"    Readiness Interval (s):      {services.readiness_interval:g}\n\n"

    config_text += "  Toolchain (toolchain.*):\n"
    config_text += f"    Composer:                    {toolchain.composer_command}\n"
    config_text += f"    Drush:                       {toolchain.drush_command}\n"
    config_text += f"    npm:                         {toolchain.npm_command}\n"
    config_text += f"    Theme Build Script:          {toolchain.theme_build_script}\n"
    return config_text


def format_plan(
    plan: List[Tuple[Step, bool]], app_config: ProvisionSettings
) -> str:
    """Render each step with whether it will run under the current settings."""
    symbols = app_config.symbols
    total = len(plan)
    lines = [f"{symbols.get('info', 'ℹ️')} Provisioning plan:", ""]
    for step, will_run in plan:
        marker = symbols.get("step", "➡️") if will_run else symbols.get("skip", "⏭️")
        status = "run" if will_run else "skip"
        line = f"  {marker} {step.ordinal}/{total} {step.name:<22} {status}"
        if not will_run and step.skip_notice:
            line += f" ({step.skip_notice})"
        lines.append(line)
    return "\n".join(lines) + "\n"


def check_host_tools(app_config: ProvisionSettings) -> List[Tuple[str, bool]]:
    """Which host-side executables are on PATH."""
    commands = [
        app_config.services.command.split()[0],
        app_config.toolchain.npm_command.split()[0],
    ]
    return [(name, command_exists(name)) for name in commands]

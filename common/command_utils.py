# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing external commands and logging their output.
"""

import logging
import shlex
import shutil
import subprocess
from typing import Dict, List, Optional, Sequence, Union

from provisioner.config_models import SYMBOLS_DEFAULT, ProvisionSettings

module_logger = logging.getLogger(__name__)

REDACTED = "********"


def log_step_message(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    app_settings: Optional[ProvisionSettings] = None,
    exc_info: bool = False,
) -> None:
    """
    Log a provisioning progress message at the given level.

    Args:
        message (str): The message to log.
        level (str): One of "debug", "info", "success", "warning", "error"
            or "critical". "success" and unknown levels are logged as info.
        current_logger (Optional[logging.Logger]): Logger to use; the module
            logger is used when omitted.
        app_settings (Optional[ProvisionSettings]): Settings of the current run.
        exc_info (bool): Whether to attach exception information.
    """
    effective_logger = current_logger if current_logger else module_logger

    if level == "warning":
        effective_logger.warning(message, exc_info=exc_info)
    elif level == "error":
        effective_logger.error(message, exc_info=exc_info)
    elif level == "critical":
        effective_logger.critical(message, exc_info=exc_info)
    elif level == "debug":
        effective_logger.debug(message, exc_info=exc_info)
    else:
        effective_logger.info(message, exc_info=exc_info)


def _symbols_for(app_settings: Optional[ProvisionSettings]) -> Dict[str, str]:
    if app_settings and app_settings.symbols:
        return app_settings.symbols
    return SYMBOLS_DEFAULT


def format_command(
    command: Sequence[str], redact: Optional[Sequence[str]] = None
) -> str:
    """Render a command for logs, replacing any secret values."""
    secrets = [s for s in (redact or []) if s]
    rendered = subprocess.list2cmdline(list(command))
    for secret in secrets:
        rendered = rendered.replace(secret, REDACTED)
    return rendered


def run_command(
    command: Union[List[str], str],
    app_settings: Optional[ProvisionSettings],
    check: bool = True,
    capture_output: bool = False,
    text: bool = True,
    cmd_input: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    redact: Optional[Sequence[str]] = None,
) -> subprocess.CompletedProcess:
    """
    Execute an external command, logging what runs and how it ended.

    String commands are split with shlex; a shell is never used.

    Args:
        command (Union[List[str], str]): The command to execute.
        app_settings (Optional[ProvisionSettings]): Settings providing log symbols.
        check (bool): Raise CalledProcessError on a non-zero exit code.
        capture_output (bool): Capture stdout and stderr.
        text (bool): Decode output streams as text.
        cmd_input (Optional[str]): Data passed to the command's stdin.
        current_logger (Optional[logging.Logger]): Logger for command output.
        cwd (Optional[str]): Working directory for the command.
        env (Optional[Dict[str, str]]): Environment for the command.
        redact (Optional[Sequence[str]]): Secret values to mask in log lines.

    Returns:
        subprocess.CompletedProcess: The finished process.

    Raises:
        subprocess.CalledProcessError: The command exited non-zero and check is True.
        FileNotFoundError: The executable is not on PATH.
    """
    effective_logger = current_logger if current_logger else module_logger
    symbols = _symbols_for(app_settings)

    command_to_run: List[str] = (
        shlex.split(command) if isinstance(command, str) else list(command)
    )
    command_to_log_str = format_command(command_to_run, redact)

    log_step_message(
        f"{symbols.get('gear', '⚙️')} Executing: {command_to_log_str} {f'(in {cwd})' if cwd else ''}".rstrip(),
        "info",
        effective_logger,
        app_settings,
    )
    try:
        result = subprocess.run(
            command_to_run,
            check=check,
            capture_output=capture_output,
            text=text,
            input=cmd_input,
            cwd=cwd,
            env=env,
        )
        if capture_output:
            if result.stdout and result.stdout.strip():
                log_step_message(
                    f"   stdout: {result.stdout.strip()}",
                    "debug",
                    effective_logger,
                    app_settings,
                )
            if result.stderr and result.stderr.strip():
                log_step_message(
                    f"   stderr: {result.stderr.strip()}",
                    "debug",
                    effective_logger,
                    app_settings,
                )
        return result
    except subprocess.CalledProcessError as e:
        log_step_message(
            f"{symbols.get('error', '❌')} Command `{command_to_log_str}` failed (rc {e.returncode}).",
            "error",
            effective_logger,
            app_settings,
        )
        stderr_info = e.stderr.strip() if e.stderr and hasattr(e.stderr, "strip") else ""
        if stderr_info:
            log_step_message(
                f"   stderr: {stderr_info}",
                "error",
                effective_logger,
                app_settings,
            )
        raise
    except FileNotFoundError as e:
        log_step_message(
            f"{symbols.get('error', '❌')} Command not found: {e.filename}. Ensure it's installed and in PATH.",
            "error",
            effective_logger,
            app_settings,
        )
        raise


def command_exists(command_name: str) -> bool:
    """
    Check if a command exists in the system's PATH.

    Parameters:
        command_name (str): The name of the command to check for existence.

    Returns:
        bool: True if the command is found in the system's PATH, False otherwise.
    """
    return shutil.which(command_name) is not None

# provisioner/steps/database.py
# -*- coding: utf-8 -*-
"""
Database snapshot handling: download a fresh dump from the remote source
and load the local dump into the site database.

The download is written to a temporary file next to the target and moved
into place only once complete, so an interrupted transfer never leaves a
truncated snapshot behind.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import requests

from common.command_utils import log_step_message
from provisioner.config_models import ProvisionSettings
from provisioner.tools import ToolSet

module_logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


def fetch_dump(
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download the database snapshot from ``dump.url``, replacing the local copy.

    Args:
        app_settings: Provisioning settings with the ``dump`` section.
        current_logger: Optional logger to use.
        session: Optional requests session; plain ``requests`` is used otherwise.

    Returns:
        Path: The local snapshot path.

    Raises:
        ValueError: No snapshot URL is configured.
        requests.exceptions.RequestException: The download failed.
        OSError: The snapshot could not be written.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    dump = app_settings.dump

    if not dump.url:
        raise ValueError("No database snapshot URL configured (DUMP_URL).")

    dump_path = app_settings.dump_path
    auth = (dump.user, dump.password or "") if dump.user else None
    http = session if session is not None else requests

    log_step_message(
        f"{symbols.get('step', '➡️')} Downloading database snapshot from {dump.url}",
        "info",
        logger_to_use,
        app_settings,
    )
    response: Optional[requests.Response] = None
    tmp_name: Optional[str] = None
    try:
        dump_path.parent.mkdir(parents=True, exist_ok=True)
        response = http.get(dump.url, auth=auth, stream=True, timeout=dump.timeout)
        response.raise_for_status()

        with tempfile.NamedTemporaryFile(
            "wb", dir=dump_path.parent, prefix=f".{dump_path.name}.", delete=False
        ) as tmp:
            tmp_name = tmp.name
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    tmp.write(chunk)
        os.replace(tmp_name, dump_path)
        tmp_name = None
    except requests.exceptions.HTTPError as http_err:
        status_code = response.status_code if response is not None else "Unknown"
        log_step_message(
            f"{symbols.get('error', '❌')} HTTP error downloading snapshot: {http_err} - Status code: {status_code}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise
    except requests.exceptions.RequestException as req_err:
        log_step_message(
            f"{symbols.get('error', '❌')} Could not download snapshot: {req_err}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise
    except OSError as io_err:
        log_step_message(
            f"{symbols.get('error', '❌')} File I/O error when saving snapshot: {io_err}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        if response is not None:
            response.close()

    log_step_message(
        f"{symbols.get('success', '✅')} Database snapshot saved to {dump_path}",
        "info",
        logger_to_use,
        app_settings,
    )
    return dump_path


def snapshot_reference(app_settings: ProvisionSettings) -> str:
    """
    Path of the local snapshot as the site CLI sees it.

    The site CLI runs in the application container with the project mount
    as its working directory (``services.app_project_dir`` when set, else the
    container's own workdir), so snapshots inside the project are passed
    relative to the project root.
    """
    dump_path = app_settings.dump_path
    project_root = app_settings.project_root
    if project_root is not None:
        try:
            return dump_path.relative_to(project_root).as_posix()
        except ValueError:
            pass
    return str(dump_path)


def import_database(
    tools: ToolSet,
    app_settings: ProvisionSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Refresh the local snapshot (unless ``skip_dump_fetch``) and load it.

    The existing database is dropped before the snapshot is imported.

    Raises:
        FileNotFoundError: There is no local snapshot to import.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols

    if app_settings.skip_dump_fetch:
        log_step_message(
            f"{symbols.get('skip', '⏭️')} Snapshot download skipped; importing the existing local copy.",
            "info",
            logger_to_use,
            app_settings,
        )
    else:
        fetch_dump(app_settings, logger_to_use)

    dump_path = app_settings.dump_path
    if not dump_path.is_file():
        raise FileNotFoundError(f"Database snapshot not found: {dump_path}")

    log_step_message(
        f"{symbols.get('step', '➡️')} Importing database snapshot {dump_path}",
        "info",
        logger_to_use,
        app_settings,
    )
    tools.site_cli.sql_drop()
    tools.site_cli.sql_import(snapshot_reference(app_settings))

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging setup shared by the CLI and the provisioning steps.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from provisioner.config_models import SYMBOLS_DEFAULT

module_logger = logging.getLogger(__name__)

DETAILED_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"
SIMPLE_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(symbol)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Level -> (symbols key, fallback).
_LEVEL_SYMBOLS = {
    logging.DEBUG: ("debug", "🐛"),
    logging.INFO: ("info", "ℹ️"),
    logging.WARNING: ("warning", "⚠️"),
    logging.ERROR: ("error", "❌"),
    logging.CRITICAL: ("critical", "🔥"),
}


class SymbolFormatter(logging.Formatter):
    """A formatter that exposes a level-dependent symbol as ``%(symbol)s``."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        symbols: Optional[Dict[str, str]] = None,
    ):
        super().__init__(fmt, datefmt)
        self.symbols = symbols or SYMBOLS_DEFAULT

    def format(self, record: logging.LogRecord) -> str:
        key, fallback = _LEVEL_SYMBOLS.get(record.levelno, (None, ""))
        record.symbol = self.symbols.get(key, fallback) if key else fallback
        return super().format(record)


def setup_logging(
    log_level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_format_str: Optional[str] = None,
    log_prefix: Optional[str] = None,
    symbols: Optional[Dict[str, str]] = None,
) -> None:
    """
    Point the root logger at stdout and, optionally, a log file.

    Existing root handlers are replaced, so the CLI can call this again once
    the settings (prefix, symbols) are known. A log file that cannot be
    opened is reported as a warning and the run continues on stdout only.
    """
    prefix = f"{log_prefix.strip()} " if log_prefix and log_prefix.strip() else ""
    formatter = SymbolFormatter(
        fmt=prefix + (log_format_str or SIMPLE_LOG_FORMAT),
        datefmt=LOG_DATE_FORMAT,
        symbols=symbols,
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_error: Optional[OSError] = None
    if log_file:
        try:
            log_file_path = Path(log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file_path, mode="a"))
        except OSError as e:
            file_error = e

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    if file_error is not None:
        module_logger.warning(f"Could not open log file {log_file}: {file_error}")

# common/network_utils.py
# -*- coding: utf-8 -*-
"""
Network-related utility functions.
"""
import logging
import socket
import time
from typing import Callable, Optional

from provisioner.config_models import SYMBOLS_DEFAULT, ProvisionSettings

from .command_utils import log_step_message

module_logger = logging.getLogger(__name__)


class ServiceNotReadyError(Exception):
    """A service did not become ready before the deadline."""

    def __init__(self, target: str, timeout: float, attempts: int):
        self.target = target
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(
            f"{target} did not become ready within {timeout:g}s "
            f"({attempts} attempts)"
        )


def port_is_open(host: str, port: int, connect_timeout: float = 1.0) -> bool:
    """Return True if a TCP connection to host:port succeeds."""
    try:
        with socket.create_connection((host, port), timeout=connect_timeout):
            return True
    except OSError:
        return False


def wait_until(
    check: Callable[[], bool],
    target: str,
    timeout: float,
    interval: float,
    app_settings: Optional[ProvisionSettings] = None,
    current_logger: Optional[logging.Logger] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Poll ``check`` until it returns True or the timeout expires.

    The check runs at least once, even with a zero timeout, and no sleep
    reaches past the deadline.

    Args:
        check: Readiness probe; True means ready.
        target: Description of what is polled, used in log lines and errors.

    Returns:
        int: Number of checks made, including the successful one.

    Raises:
        ServiceNotReadyError: No check succeeded before the deadline.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )

    deadline = clock() + timeout
    attempts = 0
    while True:
        attempts += 1
        if check():
            log_step_message(
                f"{symbols.get('success', '✅')} {target} is ready (attempt {attempts}).",
                "info",
                logger_to_use,
                app_settings,
            )
            return attempts

        remaining = deadline - clock()
        if remaining <= 0:
            raise ServiceNotReadyError(target, timeout, attempts)

        log_step_message(
            f"{target} not ready yet (attempt {attempts}); retrying in {min(interval, remaining):g}s",
            "debug",
            logger_to_use,
            app_settings,
        )
        sleep(min(interval, remaining))

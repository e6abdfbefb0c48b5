import socket
from unittest.mock import MagicMock

import pytest

from common.network_utils import ServiceNotReadyError, port_is_open, wait_until


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_wait_until_ready_immediately(mock_logger):
    clock = FakeClock()
    check = MagicMock(return_value=True)

    attempts = wait_until(
        check, "db", timeout=10, interval=2,
        current_logger=mock_logger, sleep=clock.sleep, clock=clock,
    )

    assert attempts == 1
    assert clock.sleeps == []
    check.assert_called_once_with()


def test_wait_until_polls_until_ready(mock_logger):
    clock = FakeClock()
    check = MagicMock(side_effect=[False, False, True])

    attempts = wait_until(
        check, "service 'db'", timeout=10, interval=2,
        current_logger=mock_logger, sleep=clock.sleep, clock=clock,
    )

    assert attempts == 3
    assert clock.sleeps == [2, 2]
    assert "service 'db' is ready (attempt 3)" in mock_logger.info.call_args[0][0]


def test_wait_until_times_out(mock_logger):
    clock = FakeClock()
    check = MagicMock(return_value=False)

    with pytest.raises(ServiceNotReadyError) as excinfo:
        wait_until(
            check, "127.0.0.1:3306", timeout=5, interval=2,
            current_logger=mock_logger, sleep=clock.sleep, clock=clock,
        )

    # Sleeps never overshoot the deadline.
    assert clock.sleeps == [2, 2, 1]
    assert excinfo.value.attempts == 4
    assert excinfo.value.target == "127.0.0.1:3306"
    assert "did not become ready within 5s" in str(excinfo.value)


def test_wait_until_zero_timeout_still_checks_once(mock_logger):
    clock = FakeClock()
    check = MagicMock(return_value=False)

    with pytest.raises(ServiceNotReadyError):
        wait_until(
            check, "db", timeout=0, interval=2,
            current_logger=mock_logger, sleep=clock.sleep, clock=clock,
        )

    check.assert_called_once()
    assert clock.sleeps == []


def test_port_is_open_true(mocker):
    connection = MagicMock()
    create = mocker.patch("socket.create_connection", return_value=connection)

    assert port_is_open("db", 3306, connect_timeout=0.5) is True
    create.assert_called_once_with(("db", 3306), timeout=0.5)
    connection.__exit__.assert_called_once()


def test_port_is_open_refused(mocker):
    mocker.patch("socket.create_connection", side_effect=ConnectionRefusedError())

    assert port_is_open("db", 3306) is False


def test_port_is_open_timeout(mocker):
    mocker.patch("socket.create_connection", side_effect=socket.timeout())

    assert port_is_open("db", 3306) is False

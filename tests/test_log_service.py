from __future__ import annotations

import logging

import pytest

from check_mountpoints.services.log_service import setup_logging, syslog_handler


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _added(root_logger, before):
    return [type(h) for h in root_logger.handlers if h not in before]


def test_missing_syslog_socket_is_tolerated(tmp_path):
    assert syslog_handler("check_mountpoints", str(tmp_path / "log")) is None


def test_verbose_adds_stderr_handler(tmp_path, root_logger):
    before = list(root_logger.handlers)
    setup_logging(True, address=str(tmp_path / "log"))

    assert root_logger.level == logging.DEBUG
    assert _added(root_logger, before) == [logging.StreamHandler]


def test_quiet_without_syslog_gets_null_handler(tmp_path, root_logger):
    before = list(root_logger.handlers)
    setup_logging(False, address=str(tmp_path / "log"))

    assert root_logger.level == logging.INFO
    assert _added(root_logger, before) == [logging.NullHandler]


def test_repeated_setup_does_not_stack_handlers(tmp_path, root_logger):
    before = list(root_logger.handlers)
    for verbose in (True, True, False):
        setup_logging(verbose, address=str(tmp_path / "log"))

    assert _added(root_logger, before) == [logging.NullHandler]

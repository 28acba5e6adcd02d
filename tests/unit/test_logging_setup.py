"""Tests for CLI logging setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from unipilot.logging_setup import configure_logging


def test_configure_logging_installs_rich_handler():
    logger = configure_logging("DEBUG")
    assert logger.name == "unipilot"
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert [type(h) for h in logger.handlers] == [RichHandler]


def test_configure_logging_twice_does_not_stack_handlers():
    configure_logging("INFO")
    logger = configure_logging("WARNING")
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_configure_logging_unknown_level_falls_back_to_info():
    assert configure_logging("chatty").level == logging.INFO


def test_child_loggers_inherit_level():
    configure_logging("WARNING")
    assert not logging.getLogger("unipilot.store.repository").isEnabledFor(logging.INFO)

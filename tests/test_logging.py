"""Tests for stubsmith.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from stubsmith.logging import configure_logging, get_logger


@pytest.fixture
def reset_logging():
    yield
    configure_logging()


def test_get_logger_nests_under_stubsmith() -> None:
    assert get_logger().name == "stubsmith"
    assert get_logger("resolve").name == "stubsmith.resolve"


def test_verbose_enables_debug(reset_logging) -> None:
    assert configure_logging(verbose=True).level == logging.DEBUG
    assert configure_logging().level == logging.INFO


def test_reconfiguring_replaces_handlers(reset_logging) -> None:
    configure_logging()
    logger = configure_logging()

    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_log_file_receives_records(tmp_path: Path, reset_logging) -> None:
    log_file = tmp_path / "nested" / "run.log"
    configure_logging(verbose=True, log_file=log_file)

    get_logger("resolve").debug("Resolving %d fragments", 3)
    configure_logging()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("DEBUG stubsmith.resolve: Resolving 3 fragments")

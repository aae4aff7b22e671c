from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from discretion.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)


def _settings(log_dir: Path, **extra):
    return SimpleNamespace(DISCRETION_LOG_DIR=log_dir, DISCRETION_LOG_LEVEL="debug", DISCRETION_LOG_BACKUP_COUNT=3, **extra)


def test_setup_logging_writes_to_file(tmp_path: Path):
    log_file = setup_logging(_settings(tmp_path / "logs"))

    logging.getLogger("discretion.test").debug("hello from the test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_file == tmp_path / "logs" / "discretion.log"
    content = log_file.read_text(encoding="utf-8")
    assert "logging enabled" in content
    assert "hello from the test" in content


def test_repeated_setup_does_not_duplicate_handlers(tmp_path: Path):
    setup_logging(_settings(tmp_path))
    setup_logging(_settings(tmp_path))
    assert len(logging.getLogger().handlers) == 1


def test_console_handler_only_when_asked(tmp_path: Path):
    setup_logging(_settings(tmp_path), console=True)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 2
    stream = [h for h in handlers if type(h) is logging.StreamHandler]
    assert stream and stream[0].level == logging.WARNING


def test_sdk_loggers_are_quietened(tmp_path: Path):
    setup_logging(_settings(tmp_path))
    assert logging.getLogger("azure").level == logging.WARNING
    assert logging.getLogger().level == logging.DEBUG

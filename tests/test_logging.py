"""
Tests for setup_logging.
"""

import logging

import pytest

from placement_mock.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    ws_level = logging.getLogger("websockets").level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("websockets").setLevel(ws_level)


def test_writes_to_log_file(tmp_path):
    log_file = tmp_path / "mock.log"
    logger = setup_logging(log_file=str(log_file))

    logging.getLogger("placement_mock.core.session").info("send: [work:start] {}")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logger.name == "placement_mock"
    assert "send: [work:start]" in log_file.read_text()


def test_quiets_websockets_unless_verbose(tmp_path):
    setup_logging(log_file=str(tmp_path / "a.log"))
    assert logging.getLogger("websockets").level == logging.WARNING

    setup_logging(verbose=True, log_file=str(tmp_path / "b.log"))
    assert logging.getLogger("websockets").level == logging.DEBUG
    assert logging.getLogger("placement_mock").level == logging.DEBUG


def test_repeated_setup_replaces_handlers(tmp_path):
    setup_logging(log_file=str(tmp_path / "a.log"))
    setup_logging(log_file=str(tmp_path / "b.log"))

    files = [h.baseFilename for h in logging.getLogger().handlers
             if isinstance(h, logging.FileHandler)]
    assert files == [str(tmp_path / "b.log")]

import logging

import pytest

from focusflow.utils.logger import setup_from_settings, setup_logger


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if getattr(handler, "_focusflow", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def own_handlers(root):
    return [h for h in root.handlers if getattr(h, "_focusflow", False)]


def test_setup_twice_keeps_one_handler(root_logger):
    setup_logger(level="debug")
    setup_logger(level="warning")

    assert len(own_handlers(root_logger)) == 1
    assert root_logger.level == logging.WARNING


def test_log_file_from_settings(root_logger, settings, tmp_path):
    settings.LOG_FILE = tmp_path / "logs" / "focusflow.log"
    setup_from_settings(settings)

    logging.getLogger("focusflow.test").error("written to file")
    for handler in own_handlers(root_logger):
        handler.flush()

    assert len(own_handlers(root_logger)) == 2
    assert "written to file" in settings.LOG_FILE.read_text(encoding="utf-8")

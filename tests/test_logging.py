import logging
from logging.handlers import RotatingFileHandler

import pytest

from timetable_backend.core import logging as app_logging


@pytest.fixture()
def root_logger():
    """Root logger without the app's handlers; the originals are put back afterwards."""
    root = logging.getLogger()
    saved_level = root.level
    saved = app_logging.installed_handlers(root)
    for handler in saved:
        root.removeHandler(handler)
    yield root
    for handler in app_logging.installed_handlers(root):
        root.removeHandler(handler)
        handler.close()
    for handler in saved:
        root.addHandler(handler)
    root.setLevel(saved_level)


def test_development_logs_to_console_only(root_logger, tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(app_logging, "LOGS_DIR", tmp_path / "logs")
    app_logging.setup_logging(environment="development")
    assert root_logger.level == logging.DEBUG
    assert [type(h) for h in app_logging.installed_handlers(root_logger)] == [logging.StreamHandler]
    assert not (tmp_path / "logs").exists()


def test_production_adds_rotating_file(root_logger, tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(app_logging, "LOGS_DIR", tmp_path)
    app_logging.setup_logging(environment="production")
    assert root_logger.level == logging.INFO
    handlers = app_logging.installed_handlers(root_logger)
    assert any(isinstance(h, RotatingFileHandler) for h in handlers)

    logging.getLogger("timetable_backend.tests").info("saved timetable")
    for handler in handlers:
        handler.flush()
    assert "saved timetable" in (tmp_path / "app.log").read_text(encoding="utf-8")


def test_explicit_level_wins(root_logger) -> None:
    app_logging.setup_logging(environment="development", level="warning")
    assert root_logger.level == logging.WARNING


def test_unknown_level_falls_back_to_environment(root_logger) -> None:
    app_logging.setup_logging(environment="production", level="chatty")
    assert root_logger.level == logging.INFO


def test_second_call_keeps_handlers(root_logger) -> None:
    app_logging.setup_logging(environment="development")
    app_logging.setup_logging(environment="development")
    assert len(app_logging.installed_handlers(root_logger)) == 1


def test_foreign_root_handler_does_not_block_setup(root_logger) -> None:
    foreign = logging.NullHandler()
    root_logger.addHandler(foreign)
    try:
        app_logging.setup_logging(environment="development")
        assert len(app_logging.installed_handlers(root_logger)) == 1
        assert foreign in root_logger.handlers
    finally:
        root_logger.removeHandler(foreign)

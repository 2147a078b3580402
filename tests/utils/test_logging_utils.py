# tests/utils/test_logging_utils.py
import logging

import pytest

from src.utils.logging_utils import configure_logging

@pytest.fixture
def app_logger():
    logger = logging.getLogger("src")
    saved = (list(logger.handlers), logger.level, logger.propagate, getattr(logger, "_entries_configured", False))
    logger.handlers = []
    logger._entries_configured = False
    yield logger
    logger.handlers, logger.level, logger.propagate, logger._entries_configured = saved

def test_configure_logging_is_idempotent(app_logger):
    """여러 번 호출해도 핸들러가 한 번만 등록되고, 레벨은 갱신되는지 테스트합니다."""
    configure_logging("INFO")
    configure_logging("debug")
    assert len(app_logger.handlers) == 1
    assert app_logger.level == logging.DEBUG

def test_unknown_level_falls_back_to_info(app_logger):
    configure_logging("chatty")
    assert app_logger.level == logging.INFO

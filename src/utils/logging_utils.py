import logging
import sys

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_ROOT_LOGGER_NAME = "src"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    애플리케이션 로거('src')에 스트림 핸들러를 한 번만 등록합니다.
    이미 설정된 경우 레벨만 갱신합니다.
    """
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if getattr(logger, "_entries_configured", False):
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    logger._entries_configured = True
    return logger

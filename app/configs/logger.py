"""File logging helpers shared by the module-level loggers."""

from logging import INFO, Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter

from app.configs.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def file_logger(logger: Logger) -> Logger:
    """
    Attach a rotating JSON file handler to ``logger``.

    The handler is only added when ``LOG_TO_FILE`` is enabled, and only once
    per logger so repeated imports do not duplicate output.

    Args:
        logger: Logger obtained from ``logging.getLogger``.

    Returns:
        The same logger, for one-line module setup.
    """
    if not settings.LOG_TO_FILE:
        return logger

    log_file = Path(settings.LOG_FILE)
    if any(
        isinstance(handler, RotatingFileHandler)
        and Path(handler.baseFilename) == log_file.resolve()
        for handler in logger.handlers
    ):
        return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
    handler.setLevel(INFO)
    handler.setFormatter(JsonFormatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger

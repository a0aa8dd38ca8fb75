"""
Application logging, driven by the ``logging`` section of config.yaml.

All modules log through the one logger named by ``logging.name``. The rotating
file handler and the stdout handler are each optional, and the HTTP client
libraries listed in ``logging.quiet_loggers`` are held at WARNING.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from ai_editor.core.config import LoggingConfig, get_config, get_log_path

_logger: Optional[logging.Logger] = None


def _level(log_config: LoggingConfig) -> int:
    return getattr(logging, log_config.level.upper(), logging.INFO)


def build_handlers(log_config: LoggingConfig) -> List[logging.Handler]:
    """Create the handlers ``log_config`` asks for, already levelled and formatted."""
    handlers: List[logging.Handler] = []
    if log_config.file:
        handlers.append(
            RotatingFileHandler(
                get_log_path(log_config.file),
                maxBytes=log_config.max_size * 1024 * 1024,
                backupCount=log_config.backup_count,
                encoding="utf-8",
            )
        )
    if log_config.console:
        handlers.append(logging.StreamHandler(sys.stdout))

    formatter = logging.Formatter(log_config.format)
    for handler in handlers:
        handler.setLevel(_level(log_config))
        handler.setFormatter(formatter)
    return handlers


def configure_logger(log_config: LoggingConfig) -> logging.Logger:
    """
    (Re)configure the logger named by ``log_config.name``.

    Handlers from an earlier call are closed and replaced, so calling this
    twice never duplicates output.
    """
    logger = logging.getLogger(log_config.name)
    logger.setLevel(_level(log_config))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in build_handlers(log_config):
        logger.addHandler(handler)

    for name in log_config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger


def setup_logging() -> logging.Logger:
    """Configure the application logger from config.yaml once; later calls reuse it."""
    global _logger
    if _logger is None:
        _logger = configure_logger(get_config().logging)
    return _logger


def get_logger() -> logging.Logger:
    return setup_logging()

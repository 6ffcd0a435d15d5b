"""
Logging Setup Module
====================

One place to attach a handler to the package logger. Library modules only
call ``logging.getLogger(__name__)``; applications opt in here.
"""

import json
import logging
import sys
from typing import Optional

from .settings import LoggingConfig

LOGGER_NAME = 'pathai'


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'level': record.levelname,
            'msg': record.getMessage(),
            'logger': record.name,
        }
        extra = getattr(record, 'extra', None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload['exc'] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = 'WARNING',
                      json_format: bool = False,
                      config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the ``pathai`` logger.

    Calling this more than once only updates the level; a second handler
    is never attached.

    Args:
        level: Logging level name
        json_format: Emit JSON lines instead of plain text
        config: Optional LoggingConfig overriding the two arguments above

    Returns:
        The package logger
    """
    if config is not None:
        level = config.level
        json_format = config.json_format

    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if json_format:
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(logging.Formatter(
                '%(asctime)s %(levelname)-7s %(name)s: %(message)s'
            ))
        logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger

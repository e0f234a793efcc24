"""Logging for the arcbos_ops package logger.

Records logged by the validator carry ``batch_id`` and ``kind`` extras.
The JSON format emits them as fields; the text format prints them in a
bracketed prefix, with ``-`` when a record has none.
"""

import logging
import os
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

PACKAGE_LOGGER = 'arcbos_ops'
SERVICE_NAME = 'arcbos-ops'
CONTEXT_FIELDS = ('batch_id', 'kind')

JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(batch_id)s %(kind)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class BatchContextFilter(logging.Filter):
    """Give every record the context attributes the text format prints."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in CONTEXT_FIELDS:
            if getattr(record, name, None) is None:
                setattr(record, name, '-')
        return True


def _json_formatter(static_fields: Optional[Dict[str, Any]]) -> JsonFormatter:
    return JsonFormatter(
        JSON_FORMAT,
        datefmt=DATE_FORMAT,
        rename_fields={'asctime': 'timestamp', 'levelname': 'level'},
        static_fields={'service': SERVICE_NAME, **(static_fields or {})},
    )


def setup_logging(
    level: str = None,
    format_type: str = 'json',
    log_file: Optional[str] = None,
    static_fields: Optional[Dict[str, Any]] = None
) -> logging.Logger:
    """Configure the package logger and return it.

    Args:
        level: Level name; defaults to ``$LOG_LEVEL``, then INFO
        format_type: ``'json'`` or ``'text'``
        log_file: Write to this file instead of stderr
        static_fields: Extra constant fields for every JSON record

    Calling it again replaces the handler installed by the previous call.
    """
    level = level or os.getenv('LOG_LEVEL', 'INFO')
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file, encoding='utf-8') if log_file else logging.StreamHandler(sys.stderr)

    if format_type == 'json':
        handler.setFormatter(_json_formatter(static_fields))
    else:
        handler.addFilter(BatchContextFilter())
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(handler)
    return logger

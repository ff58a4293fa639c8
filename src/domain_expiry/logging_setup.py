"""
Logging configuration.

Console output goes through Rich when colors are enabled, otherwise through a
plain stream handler. Optionally every record is also shipped to Logstash as
one JSON document per line over TCP.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from rich.logging import RichHandler

from .config import LogConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {'message', 'asctime'}


class LogstashHandler(logging.handlers.SocketHandler):
    """
    Sends records to a Logstash TCP input using the json_lines codec.

    Each document carries ``@timestamp``, ``app``, ``level``, ``target``
    (logger name), ``message`` and any ``extra`` fields under ``fields``.
    """

    def __init__(self, host: str, port: int, app_name: str):
        super().__init__(host, port)
        self.app_name = app_name

    def to_document(self, record: logging.LogRecord) -> Dict[str, Any]:
        fields = {
            key: value if isinstance(value, (str, int, float, bool, type(None))) else repr(value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS
        }
        if record.exc_info:
            fields['exception'] = logging.Formatter().formatException(record.exc_info)

        return {
            "@timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "app": self.app_name,
            "level": record.levelname,
            "target": record.name,
            "message": record.getMessage(),
            "fields": fields,
        }

    def makePickle(self, record: logging.LogRecord) -> bytes:
        return (json.dumps(self.to_document(record), ensure_ascii=False) + "\n").encode('utf-8')


def setup_logging(config: LogConfig) -> None:
    """
    Configure the root logger from LogConfig.

    Args:
        config: Logging settings (level, colors, optional Logstash target)
    """
    numeric_level = getattr(logging, config.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if config.use_color:
        console_handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        console_handler.setFormatter(logging.Formatter('%(name)s: %(message)s', datefmt=DATE_FORMAT))
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    console_handler.setLevel(numeric_level)
    root_logger.addHandler(console_handler)

    if config.logstash_host and config.logstash_port and config.app_name:
        logstash_handler = LogstashHandler(config.logstash_host, config.logstash_port, config.app_name)
        logstash_handler.setLevel(numeric_level)
        root_logger.addHandler(logstash_handler)

    logger.info(f"Logging initialized at {config.log_level} level (use_color={config.use_color})")

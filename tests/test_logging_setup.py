"""
Tests for logging configuration.
"""

import json
import logging
import sys

import pytest
from rich.logging import RichHandler

from domain_expiry.config import LogConfig
from domain_expiry.logging_setup import LogstashHandler, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def make_record(msg="Domain %s expires soon", args=("example.com",), **extra):
    record = logging.LogRecord("domain_expiry.executor", logging.WARNING, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogstashHandler:
    """Tests for LogstashHandler document building."""

    def test_document(self):
        handler = LogstashHandler("localhost", 5000, "expiry")
        document = handler.to_document(make_record())

        assert document["app"] == "expiry"
        assert document["level"] == "WARNING"
        assert document["target"] == "domain_expiry.executor"
        assert document["message"] == "Domain example.com expires soon"
        assert document["@timestamp"].endswith("+00:00")
        assert document["fields"] == {}

    def test_extra_fields(self):
        handler = LogstashHandler("localhost", 5000, "expiry")
        document = handler.to_document(make_record(days=3, hosts=["a", "b"]))

        assert document["fields"] == {"days": 3, "hosts": "['a', 'b']"}

    def test_exception_included(self):
        handler = LogstashHandler("localhost", 5000, "expiry")
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        assert "RuntimeError: boom" in handler.to_document(record)["fields"]["exception"]

    def test_json_line(self):
        handler = LogstashHandler("localhost", 5000, "expiry")
        payload = handler.makePickle(make_record(msg="Срок истекает", args=None))

        assert payload.endswith(b"\n")
        assert json.loads(payload.decode("utf-8"))["message"] == "Срок истекает"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_plain_handler(self, restore_root_logger):
        setup_logging(LogConfig(log_level="debug"))

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert type(restore_root_logger.handlers[0]) is logging.StreamHandler

    def test_rich_handler(self, restore_root_logger):
        setup_logging(LogConfig(log_level="warning", use_color=True))

        assert isinstance(restore_root_logger.handlers[0], RichHandler)
        assert restore_root_logger.level == logging.WARNING

    def test_logstash_requires_all_settings(self, restore_root_logger):
        setup_logging(LogConfig(logstash_host="logs.local", logstash_port=5000))

        assert not any(isinstance(h, LogstashHandler) for h in restore_root_logger.handlers)

    def test_logstash_handler_added(self, restore_root_logger):
        setup_logging(LogConfig(log_level="error", logstash_host="logs.local", logstash_port=5000, app_name="expiry"))

        handlers = [h for h in restore_root_logger.handlers if isinstance(h, LogstashHandler)]
        assert len(handlers) == 1
        assert handlers[0].app_name == "expiry"

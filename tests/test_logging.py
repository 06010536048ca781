"""
Tests for structured logging
"""

import json
import logging
import sys
from decimal import Decimal

from finance_tracker.logging_config import JSONFormatter, get_logger, log_action, setup_logging


def make_record(message="hello", **attrs):
    record = logging.LogRecord("finance_tracker.test", logging.INFO, __file__, 1, message, (), None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(make_record()))

        assert entry['level'] == "INFO"
        assert entry['logger'] == "finance_tracker.test"
        assert entry['message'] == "hello"
        assert "timestamp" in entry
        assert "action" not in entry

    def test_structured_fields(self):
        record = make_record(action="create_account", resource="account:1", extra={"balance": "1.00"})
        entry = json.loads(JSONFormatter().format(record))

        assert entry['action'] == "create_account"
        assert entry['resource'] == "account:1"
        assert entry['extra'] == {"balance": "1.00"}

    def test_decimals_and_exceptions(self):
        try:
            raise RuntimeError("disk gone")
        except RuntimeError:
            record = make_record(extra={"amount": Decimal("12.50")})
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))

        assert entry['extra'] == {"amount": "12.50"}
        assert "RuntimeError: disk gone" in entry['exception']


class TestLogAction:

    def test_attaches_structured_data(self, caplog):
        logger = get_logger("finance_tracker.test")
        with caplog.at_level(logging.INFO, logger="finance_tracker.test"):
            log_action(logger, "info", "Account created", action="create_account",
                       resource="account:abc", extra={"account_type": "checking"})

        record = caplog.records[-1]
        assert record.getMessage() == "Account created"
        assert record.action == "create_account"
        assert record.resource == "account:abc"
        assert record.extra == {"account_type": "checking"}

    def test_respects_level(self, caplog):
        logger = get_logger("finance_tracker.test")
        with caplog.at_level(logging.WARNING, logger="finance_tracker.test"):
            log_action(logger, "info", "quiet")
        assert caplog.records == []


class TestSetupLogging:

    def teardown_method(self):
        logger = logging.getLogger("finance_tracker.setup_test")
        logger.handlers.clear()
        logger.propagate = True

    def test_json_handler(self):
        logger = setup_logging("debug", "json", logger_name="finance_tracker.setup_test")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.propagate is False

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging("INFO", "text", logger_name="finance_tracker.setup_test")
        logger = setup_logging("INFO", "text", logger_name="finance_tracker.setup_test")

        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

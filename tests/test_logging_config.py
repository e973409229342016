"""
Tests for structured logging setup
"""

import json
import logging

from teller.logging_config import JSONFormatter, setup_logging, get_logger, log_action


class TestJSONFormatter:
    """Test JSON log records"""

    def test_structured_fields(self):
        record = logging.LogRecord("teller.test", logging.INFO, __file__, 1, "hello", (), None)
        record.account_id = "A1"
        record.action = "deposit"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "hello"
        assert entry["account_id"] == "A1"
        assert entry["action"] == "deposit"
        assert "extra" not in entry


class TestSetupLogging:
    """Test logger configuration"""

    def test_file_handler_and_log_action(self, tmp_path):
        log_file = tmp_path / "teller.log"
        logger = setup_logging("INFO", logger_name="teller.test_setup", log_file=str(log_file))

        log_action(logger, "info", "Account opened", account_id="A1",
                   action="account_created", extra={"initial_balance": "1"})
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().splitlines()[0])
        assert entry["message"] == "Account opened"
        assert entry["account_id"] == "A1"
        assert entry["extra"] == {"initial_balance": "1"}
        assert get_logger("teller.test_setup") is logger
        assert logger.propagate is False

    def test_text_format_and_no_duplicate_handlers(self, tmp_path):
        log_file = tmp_path / "teller.log"
        setup_logging("DEBUG", logger_name="teller.test_text", log_format="text",
                      log_file=str(log_file))
        logger = setup_logging("DEBUG", logger_name="teller.test_text", log_format="text",
                               log_file=str(log_file))

        logger.debug("plain line")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 1
        assert "[DEBUG]" in log_file.read_text()
        assert "plain line" in log_file.read_text()

"""Tests for structured logging configuration."""

import json
import logging

import structlog

from cli.logging_config import _redact_sensitive, setup_logging


class TestLoggingConfig:
    """Test structlog setup modes."""

    def test_level_filtering(self):
        """Log level filters lower messages."""
        setup_logging(json_mode=False, level="WARNING")
        root = logging.getLogger()
        assert root.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(level="LOUD")
        assert logging.getLogger().level == logging.INFO

    def test_processor_chain(self):
        """Processor chain includes the redaction step."""
        setup_logging(json_mode=True, level="DEBUG")
        config = structlog.get_config()
        assert _redact_sensitive in config["processors"]

    def test_default_level_is_info(self):
        """Default level param is INFO."""
        setup_logging()
        root = logging.getLogger()
        assert root.level == logging.INFO

    def test_log_file_receives_json(self, tmp_path):
        log_file = tmp_path / "logs" / "mindjournal.log"
        setup_logging(json_mode=False, level="INFO", log_file=log_file)

        logging.getLogger("test_file").warning("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)["event"] == "written to file"


class TestRedaction:
    def test_journal_text_masked(self):
        event = _redact_sensitive(None, None, {"event": "x", "content": "my private diary"})
        assert event["content"] == "<16 chars>"

    def test_api_keys_masked(self):
        event = _redact_sensitive(
            None, None, {"event": "x", "error": "bad key sk-ant-REDACTED"}
        )
        assert "REDACTED" in event["error"]
        assert "uvwxyz" not in event["error"]

    def test_email_masked(self):
        event = _redact_sensitive(None, None, {"event": "user a@b.com logged in"})
        assert event["event"] == "user REDACTED@email logged in"

    def test_non_strings_untouched(self):
        event = _redact_sensitive(None, None, {"event": "x", "count": 3})
        assert event["count"] == 3

"""
Tests for logging setup
"""
import logging

from markup_review.utils.logging_config import LOG_FILE_NAME, LoggingConfig


class TestLoggingConfig:

    def test_setup_writes_log_file(self, tmp_path):
        log_dir = tmp_path / "logs"
        try:
            LoggingConfig.setup_logging(log_dir)
            logging.getLogger("markup_review.test").debug("debug line")
            for handler in logging.getLogger().handlers:
                handler.flush()

            log_file = LoggingConfig.get_log_file_path()
            assert log_file == log_dir / LOG_FILE_NAME
            content = log_file.read_text(encoding="utf-8")
            assert "Logging system initialized" in content
            assert "[DEBUG] markup_review.test: debug line" in content
        finally:
            LoggingConfig.shutdown()

    def test_setup_is_idempotent(self, tmp_path):
        try:
            LoggingConfig.setup_logging(tmp_path)
            count = len(logging.getLogger().handlers)
            LoggingConfig.setup_logging(tmp_path)

            assert len(logging.getLogger().handlers) == count
        finally:
            LoggingConfig.shutdown()

"""
Centralized logging configuration for Markup Review
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import QPlainTextEdit
from PyQt6.QtCore import QObject, pyqtSignal, Qt

LOG_FILE_NAME = "markup_review.log"


class LoggingConfig:
    """Central logging configuration"""

    _initialized = False
    _log_file_path: Optional[Path] = None
    _handlers = []
    _previous_level = logging.WARNING
    _widget_handler = None

    @classmethod
    def setup_logging(cls, log_dir: Path, console_level: int = logging.INFO):
        """Setup logging system: full DEBUG log on disk, INFO and up on stdout"""
        if cls._initialized:
            return

        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        cls._log_file_path = log_dir / LOG_FILE_NAME

        logger = logging.getLogger()
        cls._previous_level = logger.level
        logger.setLevel(logging.DEBUG)

        file_handler = logging.FileHandler(cls._log_file_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
        logger.addHandler(console_handler)

        cls._handlers = [file_handler, console_handler]
        cls._initialized = True
        logger.info("Logging system initialized")

    @classmethod
    def shutdown(cls):
        """Detach and close the handlers installed by setup_logging"""
        logger = logging.getLogger()
        for handler in cls._handlers:
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(cls._previous_level)
        cls._handlers = []
        cls.remove_widget_handler()
        cls._initialized = False

    @classmethod
    def add_widget_handler(cls, text_widget: QPlainTextEdit, log_level="INFO"):
        """Mirror log records into a QPlainTextEdit"""
        cls.remove_widget_handler()
        handler = QtLogHandler(text_widget)
        handler.setLevel(getattr(logging, log_level))
        handler.setFormatter(logging.Formatter('%(asctime)s %(message)s', datefmt='%H:%M:%S'))

        logging.getLogger().addHandler(handler)
        cls._widget_handler = handler
        return handler

    @classmethod
    def remove_widget_handler(cls):
        """Remove the widget handler"""
        if cls._widget_handler:
            logging.getLogger().removeHandler(cls._widget_handler)
            cls._widget_handler = None

    @classmethod
    def get_logger(cls, name: str):
        """Get a logger instance"""
        return logging.getLogger(name)

    @classmethod
    def get_log_file_path(cls) -> Optional[Path]:
        """Get the log file path"""
        return cls._log_file_path


class QtLogHandler(logging.Handler, QObject):
    """Logging handler that appends to a Qt text widget from any thread"""

    log_signal = pyqtSignal(str)

    def __init__(self, text_widget: QPlainTextEdit):
        logging.Handler.__init__(self)
        QObject.__init__(self)

        self.text_widget = text_widget
        self.log_signal.connect(self.append_log, Qt.ConnectionType.QueuedConnection)

    def emit(self, record):
        try:
            msg = self.format(record)
            self.log_signal.emit(msg)
        except Exception:
            self.handleError(record)

    def append_log(self, message: str):
        self.text_widget.appendPlainText(message)


__all__ = ['LoggingConfig', 'QtLogHandler', 'LOG_FILE_NAME']

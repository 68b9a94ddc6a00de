"""
Purpose: Centralized logging configuration with structured output support.
Constraints: Logging only; no business logic.
"""

# Imports
import json
import logging
import sys
import threading
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from iceminus.core.config_models import LoggingSettings

ROOT_LOGGER_NAME = "iceminus"

# Extra attributes copied into JSON records when present
_STRUCTURED_FIELDS = ("path", "line_number", "words", "strategy", "match_count", "dry_run")


# Public API
class UnifiedLogger:
    """Configures the package logger once and hands out named loggers."""

    _lock = threading.Lock()
    _global_initialized = False
    _sentry_initialized = False
    _handlers: List[logging.Handler] = []

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        self.name = name
        self.logger = logging.getLogger(name)

    def get_logger(self) -> logging.Logger:
        """Get the underlying logger instance"""
        return self.logger

    @classmethod
    def configure(cls, settings: LoggingSettings) -> None:
        """Attach console/file/JSON handlers to the package logger (first call wins)."""
        with cls._lock:
            if cls._global_initialized:
                return
            level = getattr(logging, settings.log_level, logging.WARNING)
            package_logger = logging.getLogger(ROOT_LOGGER_NAME)
            package_logger.setLevel(logging.DEBUG if settings.log_dir else level)

            simple_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(simple_formatter)
            cls._add_handler(package_logger, console_handler)

            if settings.log_dir:
                logs_dir = Path(settings.log_dir)
                logs_dir.mkdir(parents=True, exist_ok=True)
                timestamp = datetime.now().strftime("%Y%m%d")
                cls._enable_file_logging(package_logger, logs_dir, timestamp)
                if settings.json_logging:
                    cls._enable_json_logging(package_logger, logs_dir, timestamp)

            if settings.sentry_dsn:
                cls._maybe_init_sentry(settings.sentry_dsn)

            cls._global_initialized = True
            package_logger.debug("Logging configured at level %s", settings.log_level)

    @classmethod
    def reset(cls) -> None:
        """Detach every handler added by configure(); used between CLI runs in tests."""
        with cls._lock:
            package_logger = logging.getLogger(ROOT_LOGGER_NAME)
            for handler in cls._handlers:
                package_logger.removeHandler(handler)
                handler.close()
            cls._handlers = []
            package_logger.setLevel(logging.NOTSET)
            cls._global_initialized = False

    @classmethod
    def _add_handler(cls, logger: logging.Logger, handler: logging.Handler) -> None:
        logger.addHandler(handler)
        cls._handlers.append(handler)

    @classmethod
    def _enable_file_logging(cls, logger: logging.Logger, logs_dir: Path, timestamp: str) -> None:
        file_handler = RotatingFileHandler(
            logs_dir / f"iceminus_{timestamp}.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
            )
        )
        cls._add_handler(logger, file_handler)

    @classmethod
    def _enable_json_logging(cls, logger: logging.Logger, logs_dir: Path, timestamp: str) -> None:
        """Enable JSON-structured logging to a separate file"""
        json_handler = RotatingFileHandler(
            logs_dir / f"iceminus_json_{timestamp}.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        json_handler.setLevel(logging.DEBUG)
        json_handler.setFormatter(JsonFormatter())
        cls._add_handler(logger, json_handler)

    @classmethod
    def _maybe_init_sentry(cls, dsn: str) -> None:
        if cls._sentry_initialized:
            return
        try:
            import sentry_sdk
            from sentry_sdk.integrations.logging import LoggingIntegration
        except ImportError:
            logging.getLogger(ROOT_LOGGER_NAME).warning(
                "SENTRY_DSN is set but sentry-sdk is not installed; install the 'sentry' extra"
            )
            return

        sentry_sdk.init(
            dsn=dsn,
            integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        )
        cls._sentry_initialized = True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in _STRUCTURED_FIELDS:
            if hasattr(record, name):
                log_obj[name] = getattr(record, name)
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, ensure_ascii=False)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return a named logger below the package logger."""
    return UnifiedLogger(name=name).get_logger()

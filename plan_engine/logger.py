#!/usr/bin/env python3
"""
Structured logging for the plan engine.

Supports two modes:
- Human-readable: Pretty output for interactive use
- JSON: Machine-parseable structured logs for CI/CD

Set PE_LOG_FORMAT=json for structured output.

Only adapters (reporting, store, service, CLI, web app) log. The
calculators return values and never call into this module.
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path


LOGGER_NAME = 'plan_engine'


class StructuredFormatter(logging.Formatter):
    """JSON formatter for machine-parseable logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
        }

        # Add extra fields if present
        if hasattr(record, 'extra_fields'):
            log_obj['fields'] = record.extra_fields

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for interactive use."""

    LEVEL_PREFIXES = {
        'DEBUG': '[DEBUG]',
        'INFO': '',
        'WARNING': '[WARN]',
        'ERROR': '[ERROR]',
        'CRITICAL': '[CRITICAL]',
    }

    def format(self, record: logging.LogRecord) -> str:
        prefix = self.LEVEL_PREFIXES.get(record.levelname, '')
        msg = record.getMessage()

        if prefix:
            return f"{prefix} {msg}"
        return msg


class PlanLogger:
    """Structured logger for the plan engine."""

    _instance = None
    _logger = None
    _lock = threading.Lock()  # Thread-safe singleton
    _json_mode = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._logger is None:
            self._setup_logger()

    def _setup_logger(self):
        """Configure the logger."""
        self._logger = logging.getLogger(LOGGER_NAME)
        self._logger.setLevel(logging.DEBUG)

        self._json_mode = os.environ.get('PE_LOG_FORMAT', '').lower() == 'json'

        # Prevent duplicate handlers
        if self._logger.handlers:
            return

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(logging.INFO)

        if self._json_mode:
            console.setFormatter(StructuredFormatter())
        else:
            console.setFormatter(HumanFormatter())

        self._logger.addHandler(console)

    @property
    def json_mode(self) -> bool:
        return self._json_mode

    def set_level(self, level: str):
        """Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
        level_map = {
            'DEBUG': logging.DEBUG,
            'INFO': logging.INFO,
            'WARNING': logging.WARNING,
            'ERROR': logging.ERROR,
            'CRITICAL': logging.CRITICAL,
        }
        self._logger.setLevel(level_map.get(str(level).upper(), logging.INFO))

    def set_json_mode(self, enabled: bool):
        """Enable or disable JSON output mode."""
        self._json_mode = enabled
        for handler in self._logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                if enabled:
                    handler.setFormatter(StructuredFormatter())
                else:
                    handler.setFormatter(HumanFormatter())

    def add_file_handler(self, log_path: Path, json_format: bool = True):
        """Add file handler for persistent logs."""
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)

        if json_format:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))

        self._logger.addHandler(file_handler)

    # === Core logging methods ===

    def _log(self, level: int, msg: str, **kwargs):
        """Internal log method with extra fields support."""
        if not self._logger.isEnabledFor(level):
            return
        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "(unknown file)",
            0,
            msg,
            (),
            None,
        )
        if kwargs:
            record.extra_fields = kwargs
        self._logger.handle(record)

    def _with_pairs(self, msg: str, kwargs: dict) -> str:
        """Append key=value pairs to the message in human-readable mode."""
        if kwargs and not self._json_mode:
            pairs = ' | '.join(f"{k}={v}" for k, v in kwargs.items())
            return f"{msg} [{pairs}]"
        return msg

    def debug(self, msg: str, **kwargs):
        """Debug level message (fields go to JSON output only)."""
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs):
        """Info level message."""
        self._log(logging.INFO, self._with_pairs(msg, kwargs), **kwargs)

    def warning(self, msg: str, **kwargs):
        """Warning level message."""
        self._log(logging.WARNING, self._with_pairs(msg, kwargs), **kwargs)

    def error(self, msg: str, **kwargs):
        """Error level message."""
        self._log(logging.ERROR, self._with_pairs(msg, kwargs), **kwargs)

    # === Status messages ===

    def success(self, msg: str, **kwargs):
        """Success message (INFO level)."""
        if self._json_mode:
            kwargs['status'] = 'success'
            self._log(logging.INFO, msg, **kwargs)
        else:
            self._log(logging.INFO, self._with_pairs(f"[OK] {msg}", kwargs), **kwargs)


# Thread-safe global logger instance
_logger = None
_logger_lock = threading.Lock()


def get_logger() -> PlanLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        with _logger_lock:
            if _logger is None:
                _logger = PlanLogger()
    return _logger

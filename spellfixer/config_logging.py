"""
Spellfixer Logging & Errors
===========================
Structured logging and the exception hierarchy shared by the engine.

Two kinds of loggers write through the same handlers:

- ``StructuredLogger`` (``get_logger``) for the fix loop: every record is
  one JSON object carrying a correlation id and keyword fields, and
  ``log_operation`` times a whole run.
- Plain ``logging.getLogger(__name__)`` loggers in the leaf modules. They
  propagate to the ``spellfixer`` package logger, which
  ``configure_logging`` attaches the configured handlers to.

Log output is JSON by default so a fix run can be post-processed; set
``logging.format`` to ``text`` for human-readable lines.
"""

import sys
import json
import logging
import uuid
import time
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict, Any, List

PACKAGE_LOGGER = 'spellfixer'
TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5

# set on records StructuredLogger has already rendered
STRUCTURED_MARKER = 'structured'

_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
    'message', 'taskName', STRUCTURED_MARKER,
))


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def _parse_level(level: str) -> int:
    return getattr(logging, str(level).upper(), logging.INFO)


def _make_handlers(
    log_format: str,
    log_to_console: bool,
    log_dir: Optional[Path],
    file_stem: str
) -> List[logging.Handler]:
    """Console and/or rotating file handlers sharing one formatter."""
    formatter = JsonFormatter() if log_format == 'json' else logging.Formatter(TEXT_FORMAT)
    handlers: List[logging.Handler] = []

    if log_to_console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_dir / f"{file_stem}.log",
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8'
        ))

    for handler in handlers:
        handler.setFormatter(formatter)

    return handlers


class StructuredLogger:
    """
    Structured logger for the fix loop; correlation ids are per thread.

    With ``propagate=True`` no handlers are attached: rendered records go
    to the ``spellfixer`` package logger and take its level and handlers.
    """

    _local = threading.local()

    def __init__(
        self,
        name: str,
        level: str = "INFO",
        log_format: str = "json",
        log_to_console: bool = True,
        log_dir: Optional[Path] = None,
        propagate: bool = False
    ):
        self.name = name
        self.level = level
        self.log_format = log_format
        self.log_to_console = log_to_console
        self.log_dir = Path(log_dir) if log_dir else None
        self.propagate = propagate
        self._setup_logger()

    def _setup_logger(self):
        self.logger = logging.getLogger(self.name)
        self.logger.handlers.clear()
        self.logger.propagate = self.propagate

        if self.propagate:
            self.logger.setLevel(logging.NOTSET)
            return

        self.logger.setLevel(_parse_level(self.level))

        for handler in _make_handlers(self.log_format, self.log_to_console, self.log_dir, self.name.lower()):
            self.logger.addHandler(handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Correlation id of the current thread; a throwaway one when unset."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Start a new run: generate, set and return a correlation id."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _render(self, level_name: str, message: str, exc_info: bool, fields: Dict[str, Any]) -> str:
        if self.log_format != 'json':
            if not fields:
                return message
            extra = ' '.join(f"{key}={value}" for key, value in fields.items())
            return f"{message} ({extra})"

        record = {
            'timestamp': _timestamp(),
            'level': level_name,
            'logger': self.name,
            'correlation_id': self.get_correlation_id(),
            'message': message,
            **fields
        }
        if exc_info:
            import traceback
            record['traceback'] = traceback.format_exc()
        return json.dumps(record, default=str)

    def _log(self, level: int, message: str, exc_info: bool = False, **fields):
        if not self.logger.isEnabledFor(level):
            return
        text = self._render(logging.getLevelName(level), message, exc_info, fields)
        self.logger.log(level, text, exc_info=exc_info and self.log_format != 'json',
                        extra={STRUCTURED_MARKER: True})

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, exc_info: bool = False, **fields):
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """
        Log ``<operation> started`` / ``completed`` / ``failed`` with the
        elapsed time in ``duration_ms``. Exceptions are logged and re-raised.
        """
        start_time = time.time()
        self.info(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
        except Exception as e:
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=_elapsed_ms(start_time), **context)
            raise
        self.info(f"{operation} completed", operation=operation, status='completed',
                  duration_ms=_elapsed_ms(start_time), **context)


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)


class JsonFormatter(logging.Formatter):
    """
    Formats plain ``logging`` records as JSON objects.

    Records rendered by StructuredLogger (tagged with ``structured``) pass
    through unchanged; ``extra=`` fields become top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if getattr(record, STRUCTURED_MARKER, False):
            return message

        log_data = {
            'timestamp': _timestamp(),
            'level': record.levelname,
            'logger': record.name,
            'correlation_id': StructuredLogger.get_correlation_id(),
            'message': message,
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logger(name: str, config=None) -> StructuredLogger:
    """
    Get a structured logger that writes through the package handlers.

    The package logger is configured from ``config`` (or the global
    config) when it has no handlers yet.
    """
    if config is None:
        from .config import get_config
        config = get_config()

    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging(config)

    return StructuredLogger(name, log_format=config.logging.format, propagate=True)


def configure_logging(config=None) -> logging.Logger:
    """
    Attach the configured handlers to the ``spellfixer`` package logger.

    Replaces handlers from an earlier call. Returns the package logger.
    """
    if config is None:
        from .config import get_config
        config = get_config()
    cfg = config.logging

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_parse_level(cfg.level))

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    log_dir = Path(cfg.log_dir) if cfg.log_dir else None
    for handler in _make_handlers(cfg.format, cfg.to_console, log_dir, PACKAGE_LOGGER):
        package_logger.addHandler(handler)

    return package_logger


# =============================================================================
# ERRORS
# =============================================================================

class SpellfixError(Exception):
    """Base exception for the spelling engine."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ConfigError(SpellfixError):
    """Invalid configuration key or value."""
    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        super().__init__(message, code="CONFIG_ERROR", details={'key': key, **kwargs})


class WordListError(SpellfixError):
    """A word list or fix list could not be read or written."""
    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, code="WORD_LIST_ERROR", details={'path': path, **kwargs})


class ConvergenceError(SpellfixError):
    """The fix loop produced the same diagnostics twice without applying a fix."""
    def __init__(self, message: str, diagnostic_count: int = 0, **kwargs):
        super().__init__(message, code="NO_PROGRESS",
                         details={'diagnostic_count': diagnostic_count, **kwargs})


class OperationCanceledError(SpellfixError):
    """Raised when a CancellationToken is triggered."""
    def __init__(self, message: str = "Operation was canceled", **kwargs):
        super().__init__(message, code="CANCELED", details=kwargs)

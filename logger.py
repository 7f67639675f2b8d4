"""
Logging for the Pima Diabetes Report

Provides:
- Console and rotating file output configured from CONFIG
- Context tracking attached to every record
- Timing of pipeline stages

Usage:
    from logger import get_logger

    logger = get_logger(__name__)
    logger.info("Report started")

    with logger.track_time("load_dataset"):
        df = load_dataset()
"""

import logging
import logging.handlers
import sys
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional

from config import CONFIG


class PerformanceLogger:
    """
    Track and log elapsed time per named operation.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.timings: Dict[str, list] = {}
        self._lock = threading.Lock()

    @contextmanager
    def track_time(self, operation: str, log_level: str = "DEBUG"):
        """
        Measure the wrapped block and log its duration.

        Does nothing when CONFIG.get('logging.log_performance') is falsy. Otherwise the
        elapsed seconds are appended to `self.timings[operation]` and logged at
        `log_level` (falls back to debug for unknown level names).
        """
        if not CONFIG.get('logging.log_performance'):
            yield
            return

        start_time = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start_time

            with self._lock:
                self.timings.setdefault(operation, []).append(elapsed)

            log_method = getattr(self.logger, log_level.lower(), self.logger.debug)
            log_method(f"{operation} completed in {elapsed:.3f}s")

    def get_timings(self, operation: Optional[str] = None) -> Dict[str, list]:
        """Return recorded timings, optionally only those for `operation`."""
        if operation:
            return {operation: self.timings.get(operation, [])}
        return self.timings

    def print_summary(self) -> None:
        """Log average, min, max and count for every tracked operation."""
        if not self.timings:
            return

        self.logger.info("Performance Summary")
        for operation, times in self.timings.items():
            if times:
                avg = sum(times) / len(times)
                self.logger.info(
                    f"  {operation}: "
                    f"avg={avg:.3f}s, min={min(times):.3f}s, max={max(times):.3f}s (n={len(times)})"
                )


class ContextFilter(logging.Filter):
    """
    Add context information to log records.
    """

    def __init__(self):
        super().__init__()
        self.context: Dict[str, Any] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.context.items():
            setattr(record, key, value)
        return True

    def set_context(self, **kwargs) -> None:
        self.context.update(kwargs)

    def clear_context(self) -> None:
        self.context.clear()


class LoggerFactory:
    """
    Factory for creating and managing loggers.
    """

    _loggers: ClassVar[Dict[str, 'Logger']] = {}
    _context_filter: Optional[ContextFilter] = None
    _perf_logger: Optional[PerformanceLogger] = None
    _configured = False
    _lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def configure(cls) -> None:
        """
        One-time configuration of the logging system from CONFIG.

        Sets the root level and attaches the enabled handlers (file, console), each
        carrying the shared ContextFilter. When CONFIG disables logging, logging is
        disabled globally. Later calls are no-ops.
        """
        if cls._configured:
            return

        cls._context_filter = ContextFilter()

        if not CONFIG.get('logging.enabled'):
            logging.disable(logging.CRITICAL)
            cls._configured = True
            return

        log_level = CONFIG.get('logging.level', 'INFO')
        formatter = logging.Formatter(
            CONFIG.get('logging.format'),
            datefmt=CONFIG.get('logging.date_format'),
        )

        root_logger = logging.getLogger()
        numeric_level = getattr(logging, str(log_level).upper(), None)
        if not isinstance(numeric_level, int):
            print(f"[WARNING] Invalid log level '{log_level}', defaulting to INFO", file=sys.stderr)
            numeric_level = logging.INFO
        root_logger.setLevel(numeric_level)

        if CONFIG.get('logging.file_enabled'):
            cls._setup_file_logging(root_logger, formatter)

        if CONFIG.get('logging.console_enabled'):
            cls._setup_console_logging(root_logger, formatter)

        cls._configured = True

    @classmethod
    def _setup_file_logging(cls, root_logger: logging.Logger, formatter: logging.Formatter) -> None:
        """
        Attach a RotatingFileHandler using the 'logging.log_dir', 'logging.log_file',
        'logging.max_log_size' and 'logging.backup_count' settings.

        A directory that cannot be created is reported on stderr and file logging is skipped.
        """
        log_dir = Path(CONFIG.get('logging.log_dir', 'logs'))
        try:
            log_dir.mkdir(exist_ok=True, parents=True)
        except OSError as e:
            print(f"[WARNING] Failed to setup file logging: {e}", file=sys.stderr)
            return

        handler = logging.handlers.RotatingFileHandler(
            log_dir / CONFIG.get('logging.log_file', 'report.log'),
            maxBytes=CONFIG.get('logging.max_log_size', 10485760),
            backupCount=CONFIG.get('logging.backup_count', 5),
        )
        handler.setFormatter(formatter)
        handler.addFilter(cls._context_filter)
        root_logger.addHandler(handler)

    @classmethod
    def _setup_console_logging(cls, root_logger: logging.Logger, formatter: logging.Formatter) -> None:
        """Attach a stdout StreamHandler at CONFIG.get('logging.console_level')."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_level = CONFIG.get('logging.console_level', 'INFO')
        console_handler.setLevel(getattr(logging, str(console_level).upper(), logging.INFO))
        console_handler.setFormatter(formatter)
        console_handler.addFilter(cls._context_filter)
        root_logger.addHandler(console_handler)

    @classmethod
    def get_logger(cls, name: str) -> 'Logger':
        """
        Return the cached Logger for `name`, configuring logging on first use.
        """
        if not cls._configured:
            cls.configure()

        with cls._lock:
            if name not in cls._loggers:
                cls._loggers[name] = Logger(logging.getLogger(name), cls._context_filter)
            return cls._loggers[name]

    @classmethod
    def get_performance_logger(cls) -> PerformanceLogger:
        """Return the shared PerformanceLogger, creating it on first access."""
        if cls._perf_logger is None:
            cls._perf_logger = PerformanceLogger(logging.getLogger('performance'))
        return cls._perf_logger


class Logger:
    """
    Wrapper around a standard logger with operation, data and timing helpers.
    """

    def __init__(self, standard_logger: logging.Logger, context_filter: Optional[ContextFilter] = None):
        self._logger = standard_logger
        self._context_filter = context_filter
        self._perf_logger = LoggerFactory.get_performance_logger()

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs) -> None:
        self._logger.critical(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        self._logger.exception(msg, *args, **kwargs)

    def log_operation(self, operation: str, status: str = "started", **details) -> None:
        """
        Log a one-line operation event: "[operation] STATUS | key=value | ...".

        Uses ERROR level when `status` is "failed", INFO otherwise.
        """
        msg = f"[{operation}]"
        if status:
            msg += f" {status.upper()}"

        if details:
            msg += " | " + " | ".join(f"{k}={v}" for k, v in details.items())

        if status.lower() == "failed":
            self.error(msg)
        else:
            self.info(msg)

    def log_data_summary(self, df_name: str, shape: tuple, dtypes: Dict[str, str]) -> None:
        """
        Log a frame's shape and its numeric/object column counts
        (only when CONFIG.get('logging.log_data_operations') is set).
        """
        if CONFIG.get('logging.log_data_operations'):
            n_numeric = sum(1 for t in dtypes.values() if 'int' in t.lower() or 'float' in t.lower())
            n_object = sum(1 for t in dtypes.values() if 'object' in t or 'str' in t)
            self.info(f"{df_name}: shape={shape}, numeric={n_numeric}, object={n_object}")

    def log_analysis(self, analysis_type: str, outcome: str, n_vars: int, n_samples: int) -> None:
        """
        Log an analysis run (only when CONFIG.get('logging.log_analysis_operations') is set).
        """
        if CONFIG.get('logging.log_analysis_operations'):
            self.info(
                f"{analysis_type}: outcome='{outcome}', "
                f"predictors={n_vars}, n={n_samples}"
            )

    @contextmanager
    def track_time(self, operation: str, log_level: str = "DEBUG"):
        with self._perf_logger.track_time(operation, log_level):
            yield

    def get_timings(self) -> Dict[str, list]:
        return self._perf_logger.get_timings()

    def set_context(self, **kwargs) -> None:
        if self._context_filter:
            self._context_filter.set_context(**kwargs)

    def clear_context(self) -> None:
        if self._context_filter:
            self._context_filter.clear_context()


def get_logger(name: str) -> Logger:
    """
    Obtain a configured logger for the given name (typically `__name__`).
    """
    return LoggerFactory.get_logger(name)

"""
Logging configuration for the activity analytics application.

Handles:
- Timestamped rotating log files under LOG_DIR
- Unified console/file formatter with ANSI colors
- Uvicorn and SQLAlchemy logger levels
"""

import os
import sys
import logging
import re
from logging.handlers import BaseRotatingHandler
from datetime import datetime, timedelta
from typing import List, Literal
from config.settings import config

CLOSED_STREAM_PHRASES = (
    "closed file", "i/o operation", "bad file descriptor",
    "operation on closed", "stream is closed"
)


def _is_stream_usable(stream) -> bool:
    """
    Check if a stream is usable for logging without triggering errors.

    Safe to call even if the stream is already closed.
    """
    if stream is None:
        return False
    try:
        if getattr(stream, 'closed', False):
            return False
        return hasattr(stream, 'write')
    except (AttributeError, ValueError, OSError):
        return False


def _is_closed_stream_error(error: Exception) -> bool:
    error_str = str(error).lower()
    return any(phrase in error_str for phrase in CLOSED_STREAM_PHRASES)


class TimestampedRotatingFileHandler(BaseRotatingHandler):
    """
    File handler that starts a new timestamped file every ``interval_hours``.

    Example: logs/app.2025-01-15_00-00-00.log
    """

    def __init__(self, base_filename, interval_hours=24, backup_count=14, encoding='utf-8'):
        """
        Initialize the handler.

        Args:
            base_filename: Base log file path (e.g., 'logs/app.log')
            interval_hours: Hours between rotations (default: 24)
            backup_count: Number of files to keep (default: 14)
            encoding: File encoding (default: 'utf-8')
        """
        self.base_filename = base_filename
        self.interval_hours = interval_hours
        self.backup_count = backup_count
        self.current_period_start = self._get_period_start()

        current_filename = self._get_current_filename()
        log_dir = os.path.dirname(current_filename)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        BaseRotatingHandler.__init__(self, current_filename, 'a', encoding=encoding, delay=False)
        self.next_rotation_time = self.current_period_start + timedelta(hours=interval_hours)

    def _get_period_start(self) -> datetime:
        interval_seconds = self.interval_hours * 3600
        seconds_since_epoch = (datetime.now() - datetime(1970, 1, 1)).total_seconds()
        periods_passed = int(seconds_since_epoch / interval_seconds)
        return datetime(1970, 1, 1) + timedelta(seconds=periods_passed * interval_seconds)

    def _base_name(self) -> str:
        base_name = os.path.basename(self.base_filename)
        return base_name[:-4] if base_name.endswith('.log') else base_name

    def _get_current_filename(self) -> str:
        timestamp_str = self.current_period_start.strftime('%Y-%m-%d_%H-%M-%S')
        base_dir = os.path.dirname(self.base_filename) or '.'
        return os.path.join(base_dir, f"{self._base_name()}.{timestamp_str}.log")

    def shouldRollover(self, record):  # pylint: disable=invalid-name
        """Time-based rotation; the record itself is not inspected."""
        del record
        return datetime.now() >= self.next_rotation_time

    def doRollover(self):  # pylint: disable=invalid-name
        """Close the current file, prune old ones and open the next period's file."""
        if self.stream:
            self.stream.close()

        self._cleanup_old_files()

        self.current_period_start = self._get_period_start()
        self.next_rotation_time = self.current_period_start + timedelta(hours=self.interval_hours)
        self.baseFilename = os.path.abspath(self._get_current_filename())
        self.stream = self._open()

    def emit(self, record):
        """Emit a record, reopening the file once if its stream was closed."""
        if not _is_stream_usable(self.stream):
            try:
                self.stream = self._open()
            except (ValueError, OSError):
                return

        try:
            super().emit(record)
        except (ValueError, OSError, AttributeError, RuntimeError) as error:
            if not _is_closed_stream_error(error):
                raise
            try:
                self.stream = self._open()
                super().emit(record)
            except (ValueError, OSError, AttributeError, RuntimeError):
                return

    def _cleanup_old_files(self) -> None:
        """Remove log files beyond backup_count, oldest first."""
        base_dir = os.path.dirname(self.base_filename) or '.'
        prefix = self._base_name() + '.'

        log_files = []
        try:
            for filename in os.listdir(base_dir):
                if filename.startswith(prefix) and filename.endswith('.log'):
                    filepath = os.path.join(base_dir, filename)
                    try:
                        log_files.append((os.path.getmtime(filepath), filepath))
                    except OSError:
                        continue
        except OSError:
            return

        log_files.sort()
        if len(log_files) > self.backup_count:
            for _, filepath in log_files[:-self.backup_count]:
                try:
                    os.remove(filepath)
                except OSError:
                    pass


class SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that gracefully handles closed streams."""

    def emit(self, record):
        """Emit a record, dropping it if the stream has been closed."""
        if not _is_stream_usable(self.stream):
            return

        try:
            super().emit(record)
        except (ValueError, OSError, AttributeError, RuntimeError) as error:
            if _is_closed_stream_error(error):
                return
            raise


class UnifiedFormatter(logging.Formatter):
    """Unified logging formatter with ANSI color support."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARN': '\033[33m',     # Yellow
        'ERROR': '\033[31m',    # Red
        'CRIT': '\033[35m',     # Magenta
        'RESET': '\033[0m',     # Reset
        'BOLD': '\033[1m',      # Bold
    }

    LEVELS = {
        'WARNING': 'WARN',
        'CRITICAL': 'CRIT',
    }

    # Logger name prefix -> 4-letter source tag
    SOURCES = (
        ('__main__', 'MAIN'),
        ('routers', 'API'),
        ('services.activity', 'ACTV'),
        ('services.infrastructure', 'INFR'),
        ('config', 'CONF'),
        ('sqlalchemy', 'SQLA'),
        ('uvicorn', 'SRVR'),
        ('asyncio', 'ASYN'),
    )

    def __init__(self, fmt=None, datefmt=None, style: Literal['%', '{', '$'] = '%', validate=True, **_kwargs):
        """
        Initialize formatter, accepting Uvicorn's use_colors parameter.
        We ignore use_colors since we handle our own color logic.
        """
        super().__init__(fmt=fmt, datefmt=datefmt, style=style, validate=validate)

    def _source(self, name: str) -> str:
        for prefix, tag in self.SOURCES:
            if name == prefix or name.startswith(prefix + '.'):
                return tag
        return name[:4].upper()

    def format(self, record):
        timestamp = self.formatTime(record, '%H:%M:%S')

        level_name = self.LEVELS.get(record.levelname, record.levelname)
        color = self.COLORS.get(level_name, '')
        reset = self.COLORS['RESET']
        if level_name == 'CRIT':
            colored_level = f"{self.COLORS['BOLD']}{color}{level_name.ljust(5)}{reset}"
        else:
            colored_level = f"{color}{level_name.ljust(5)}{reset}"

        source = self._source(record.name).ljust(4)
        pid = os.getpid()

        message = re.sub(r' +', ' ', record.getMessage().lstrip())
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"[{timestamp}] {colored_level} | {source} | [{pid}] {message}"


class UvicornInvalidRequestFilter(logging.Filter):
    """Filter to downgrade uvicorn 'Invalid HTTP request' warnings to DEBUG level."""
    def filter(self, record):
        if record.levelno == logging.WARNING:
            message = record.getMessage()
            if 'Invalid HTTP request' in message or 'invalid request' in message.lower():
                record.levelno = logging.DEBUG
                record.levelname = 'DEBUG'
        return True


def _build_handlers(formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if _is_stream_usable(sys.stdout):
        console_handler = SafeStreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if config.log_dir:
        try:
            file_handler = TimestampedRotatingFileHandler(
                os.path.join(config.log_dir, "app.log"),
                interval_hours=24,
                backup_count=14,
                encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except OSError:
            # Log directory not writable; console logging still works
            pass

    if not handlers:
        handlers.append(logging.NullHandler())
    return handlers


def setup_logging():
    """
    Configure all logging for the application.

    Sets up:
    - Console and file handlers with the unified formatter
    - Root level from LOG_LEVEL
    - Uvicorn logger configuration
    - SQLAlchemy engine logging (statements only at DEBUG)
    """
    unified_formatter = UnifiedFormatter()
    handlers = _build_handlers(unified_formatter)
    log_level = getattr(logging, config.log_level, logging.INFO)

    # Use force=True to replace any existing configuration
    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for uvicorn_logger_name in ['uvicorn', 'uvicorn.error']:
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers = []  # Remove default handlers
        for handler in handlers:
            uvicorn_logger.addHandler(handler)
        uvicorn_logger.addFilter(UvicornInvalidRequestFilter())
        uvicorn_logger.propagate = False

    # SQL statements are only useful when explicitly debugging queries
    sql_debug_enabled = os.getenv('SQL_DEBUG', '').lower() in ('1', 'true', 'yes')
    logging.getLogger('sqlalchemy.engine').setLevel(logging.INFO if sql_debug_enabled else logging.WARNING)
    logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    # Only log from main process, not each worker
    if os.getenv('UVICORN_WORKER_ID') is None:
        logger.debug("Logging initialized: %s", config.log_level)

    return logger

"""
Logging for Termbase.

Import the helpers from here rather than using `logging` directly:
    from termbase.logging_config import debug_log, info, warning, error, Timer

Messages carry a stage tag ("[AGGREGATE]", "[CANDIDATES]", "[DICT]", ...).
Everything is appended to debug_flow.txt under the application log
directory; info and above also go to processing.log. With DEBUG=true every
message is echoed to the console as well.
"""

import logging
import sys
import time
from datetime import datetime

from termbase.config import DEBUG_LOG_FILE, DEBUG_MODE, LOG_DATE_FORMAT, LOG_FILE, LOG_FORMAT


class _DebugFileLogger:
    """Appends tagged messages to debug_flow.txt, opened on first write."""

    def __init__(self):
        self._log_file = None
        self._unavailable = False

    def _open(self):
        try:
            DEBUG_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            self._log_file = open(DEBUG_LOG_FILE, 'a', encoding='utf-8')
        except OSError:
            # Read-only home directory: console and stdlib logging only
            self._unavailable = True
            return
        self._log_file.write(f"=== Termbase extraction log, started {datetime.now().isoformat()} ===\n")

    def write(self, message: str):
        if self._log_file is None and not self._unavailable:
            self._open()
        if self._log_file:
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            self._log_file.write(f"[{timestamp}] {message}\n")
            self._log_file.flush()

    def close(self):
        if self._log_file:
            self._log_file.write(f"=== ended {datetime.now().isoformat()} ===\n\n")
            self._log_file.close()
            self._log_file = None


_debug_file_logger = _DebugFileLogger()


def _setup_standard_logging() -> logging.Logger:
    logger = logging.getLogger('Termbase')
    logger.setLevel(logging.DEBUG if DEBUG_MODE else logging.INFO)

    if logger.handlers:
        return logger

    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(file_handler)
    except OSError:
        pass  # No writable log directory; warnings still reach stderr

    if DEBUG_MODE:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(console_handler)

    return logger


_logger = _setup_standard_logging()


class Timer:
    """
    Times one pipeline stage and logs its duration.

    Usage:
        with Timer("BigramScoring") as timer:
            scores = scorer.score_bigrams(corpus)
        timer.duration_ms  # 12.4

    Logs "[TIMER] BigramScoring took 12 ms".
    """

    def __init__(self, stage: str):
        self.stage = stage
        self.duration_ms: float | None = None
        self._start = 0.0

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self._start) * 1000
        status = "failed after" if exc_type is not None else "took"
        debug_log(f"[TIMER] {self.stage} {status} {self.duration_ms:.0f} ms")
        return False


def debug_log(message: str):
    """Log a tagged debug message (file always, console when DEBUG=true)."""
    _debug_file_logger.write(message)

    if DEBUG_MODE:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        formatted = f"[{timestamp}] {message}"
        try:
            print(formatted)
            sys.stdout.flush()
        except UnicodeEncodeError:
            # Non-UTF-8 console
            sys.stdout.buffer.write((formatted + "\n").encode('utf-8', errors='replace'))
            sys.stdout.buffer.flush()


def info(message: str):
    _debug_file_logger.write(f"[INFO] {message}")
    _logger.info(message)


def warning(message: str):
    """Log a warning; recorded whether or not DEBUG is set."""
    _debug_file_logger.write(f"[WARNING] {message}")
    _logger.warning(message)


def error(message: str):
    _debug_file_logger.write(f"[ERROR] {message}")
    _logger.error(message)


def close_debug_log():
    """Flush and close debug_flow.txt; call once when the command exits."""
    _debug_file_logger.close()


__all__ = [
    'debug_log',
    'info',
    'warning',
    'error',
    'close_debug_log',
    'Timer',
]

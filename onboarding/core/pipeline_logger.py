"""Structured logging for the onboarding wizard.

Provides consistent logging with:
- Timestamps
- Log levels (DEBUG, INFO, WARNING, ERROR)
- Stage tracking (input, review, provisioning)
- Structured key=value data
- Optional file output for later analysis
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class PipelineLogger:
    """Structured logger for a wizard session."""

    def __init__(self, name: str = "onboarding", verbose: bool = False, log_dir: str | Path | None = None):
        """Initialize the logger.

        Args:
            name: Logger name.
            verbose: If True, show DEBUG level logs.
            log_dir: Directory for log files. If None, no file logging.
        """
        self.logger = logging.getLogger(name)
        self.verbose = verbose
        self._stage: str = ""
        self._stage_start: float = 0
        self._session_start: float = 0
        self._log_file: Path | None = None
        self._log_dir = Path(log_dir) if log_dir else None
        self._tick_count: int = 0
        self._tick_total: int = 0

        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(ConsoleFormatter())
            console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            self.logger.addHandler(console_handler)

        self.logger.setLevel(logging.DEBUG)

    def set_verbose(self, verbose: bool):
        """Update verbose setting."""
        self.verbose = verbose
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and handler.stream == sys.stdout:
                handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    def _ts(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _elapsed(self) -> str:
        if self._stage_start:
            return f"{time.time() - self._stage_start:.1f}s"
        return ""

    def start_session(self, label: str):
        """Mark session start and set up file logging."""
        self._session_start = time.time()

        if self._log_dir and self._log_file is None:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self._log_file = self._log_dir / f"onboarding_{timestamp}.log"

            file_handler = logging.FileHandler(self._log_file, encoding="utf-8")
            file_handler.setFormatter(FileFormatter())
            file_handler.setLevel(logging.DEBUG)
            self.logger.addHandler(file_handler)

        self.logger.info(f"[{self._ts()}] Starting session: {label}")

    def end_session(self, success: bool = True, stats: dict | None = None):
        """Mark session end."""
        elapsed = ""
        if self._session_start:
            elapsed = f"{time.time() - self._session_start:.1f}s"
        status = "COMPLETE" if success else "INCOMPLETE"

        if stats:
            self.summary(stats)
        self.logger.info(f"Session {status} [{elapsed}]")
        if self._log_file:
            self.logger.info(f"Log: {self._log_file}")

    def start_stage(self, stage: str, total: int = 0):
        """Start a wizard stage (resets the tick counter)."""
        self._stage = stage
        self._stage_start = time.time()
        self._tick_count = 0
        self._tick_total = total

        header = stage.upper()
        if total > 0:
            header += f" ({total} items)"
        self.logger.info("")
        self.logger.info(header)

    def end_stage(self):
        self._stage = ""

    def tick(self, item: str = ""):
        """Log visible progress: "  [3/25] Jane D. (4.2s)"."""
        self._tick_count += 1
        total = self._tick_total
        if total > 0:
            count = f"[{self._tick_count}/{total}]"
            suffix = f" {item}" if item else ""
            self.logger.info(f"  {count}{suffix} ({self._elapsed()})")

    def debug(self, message: str, **data):
        """Log debug message (only in verbose mode)."""
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.debug(f"[{self._ts()}] {message}")

    def info(self, message: str, **data):
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.info(f"  {message}")

    def warning(self, message: str, **data):
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.warning(f"[{self._ts()}] WARN: {message}")

    def error(self, message: str, exc: Exception | None = None, **data):
        if data:
            message = f"{message} | {_format_data(data)}"
        if exc:
            message = f"{message} | {type(exc).__name__}: {exc}"
        self.logger.error(f"[{self._ts()}] ERROR: {message}")

    def milestone(self, message: str, **data):
        """Log a high-level milestone (always visible)."""
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.info(f"  -> {message}")

    def summary(self, stats: dict):
        """Log a summary block."""
        lines = ["SUMMARY"]
        for key, value in stats.items():
            if isinstance(value, dict):
                lines.append(f"  {key}:")
                for k, v in value.items():
                    lines.append(f"    {k}: {v}")
            else:
                lines.append(f"  {key}: {value}")
        self.logger.info("\n".join(lines))

    def stage_result(self, result: str, **metrics):
        """Log stage completion with key metrics."""
        parts = [result]
        if metrics:
            parts.append(", ".join(f"{k}={v}" for k, v in metrics.items()))
        elapsed = self._elapsed()
        if elapsed:
            parts.append(f"[{elapsed}]")
        self.logger.info(f"  Done: {' | '.join(parts)}")


class ConsoleFormatter(logging.Formatter):
    """Console formatter: the message already carries its own prefix."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class FileFormatter(logging.Formatter):
    """File formatter: full timestamp and level for later analysis."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname[:4]
        return f"{ts} [{level}] {record.getMessage()}"


def _format_data(data: dict[str, Any]) -> str:
    """Format structured data for logging."""
    parts = []
    for k, v in data.items():
        if isinstance(v, str) and len(v) > 50:
            v = v[:47] + "..."
        elif isinstance(v, list) and len(v) > 5:
            v = f"[{len(v)} items]"
        parts.append(f"{k}={v}")
    return ", ".join(parts)


_logger: PipelineLogger | None = None


def get_logger(verbose: bool = False, log_dir: str | Path | None = None) -> PipelineLogger:
    """Get or create the process-wide logger.

    Args:
        verbose: If True, show DEBUG level logs in console.
        log_dir: Directory for log files (only applied if not already set).
    """
    global _logger
    if _logger is None:
        _logger = PipelineLogger(verbose=verbose, log_dir=log_dir)
    else:
        if verbose and not _logger.verbose:
            _logger.set_verbose(True)
        if log_dir and not _logger._log_dir:
            _logger._log_dir = Path(log_dir)
    return _logger


def reset_logger():
    """Reset the process-wide logger (for testing)."""
    global _logger
    if _logger:
        for handler in _logger.logger.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                handler.close()
                _logger.logger.removeHandler(handler)
    _logger = None

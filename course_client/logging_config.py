"""Logging setup for the course platform client.

The library itself only emits records; ``LoggerConfigurator`` is called by the
command line entry point. Structured error lines are also counted per
category and summarised at exit.
"""

import atexit
import logging
import os
import re
import sys
import threading
import time
from collections import defaultdict, deque
from typing import Any

import colorlog

_TOKEN_PATTERN = re.compile(
    r"(csrftoken=|X-CSRFToken[=:]\s*|csrfToken[\"']?:\s*[\"']?)([A-Za-z0-9_\-]{6,})",
    re.IGNORECASE,
)


class TokenRedactionFilter(logging.Filter):
    """Filter that masks CSRF token values echoed into log messages."""

    def filter(self, record):
        """Rewrite the record message with token values replaced by '***'."""
        message = record.getMessage()
        redacted = _TOKEN_PATTERN.sub(lambda m: f"{m.group(1)}***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ErrorAggregator:
    """Per-category error counts, reported once at process exit.

    Only the most recent occurrences of each category are retained.
    """

    def __init__(self, max_entries: int = 200):
        self.max_entries = max_entries
        self.errors: dict[str, deque[dict[str, Any]]] = defaultdict(
            lambda: deque(maxlen=self.max_entries)
        )
        self.totals: dict[str, int] = defaultdict(int)
        self.lock = threading.Lock()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] | None = None) -> None:
        with self.lock:
            self.totals[error_type] += 1
            self.errors[error_type].append(
                {"timestamp": time.time(), "message": message, "context": dict(context or {})}
            )

    def get_error_summary(self) -> dict[str, Any]:
        with self.lock:
            return {
                error_type: {
                    "total_count": self.totals[error_type],
                    "last_occurrence": entries[-1] if entries else None,
                }
                for error_type, entries in self.errors.items()
            }

    def reset(self) -> None:
        with self.lock:
            self.errors.clear()
            self.totals.clear()

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("🚨 ERROR SUMMARY REPORT")
        for error_type, stats in sorted(summary.items()):
            last = stats["last_occurrence"]
            suffix = f" (last: {last['message']})" if last else ""
            logging.warning(f"  {error_type}: {stats['total_count']} total{suffix}")


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log ``[CATEGORY] message | Exception: ... | Context: k=v`` and count it.

    Args:
        error_type: Category such as 'network', 'auth' or 'session'.
        message: What failed.
        exception: The exception, when there is one.
        context: Extra key/value pairs appended to the line.
        level: Logging level.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))
    error_aggregator.record_error(error_type, message, context)


_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}


class LoggerConfigurator:
    """Installs one colorlog stderr handler on the root logger.

    Config keys:
        quiet_libraries: Logger names capped at WARNING
            (default: aiohttp access and client loggers).
    """

    _summary_registered = False

    def __init__(self, config=None):
        self.config = config or {}

    @staticmethod
    def _formatter() -> colorlog.ColoredFormatter:
        return colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=_LOG_COLORS,
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )

    def configure(self):
        """Configure the root logger; level is DEBUG when $DEBUG is true/1/yes."""
        debug = os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")
        log_level = logging.DEBUG if debug else logging.INFO

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(self._formatter())
        handler.addFilter(TokenRedactionFilter())

        root_logger = logging.getLogger()
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

        for name in self.config.get("quiet_libraries", ("aiohttp.access", "aiohttp.client")):
            logging.getLogger(name).setLevel(logging.WARNING)

        if not LoggerConfigurator._summary_registered:
            atexit.register(self._log_final_error_summary)
            LoggerConfigurator._summary_registered = True
        return handler

    @staticmethod
    def _log_final_error_summary():
        logging.info("📊 Final error summary before shutdown:")
        error_aggregator.log_summary_report()

"""
Structured logging for candidatehub.

Console and file outputs plus counters for record store health: calls and
failures per operation, cache fallbacks and degraded writes.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json
import copy


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring record store availability.
    """

    def __init__(
        self,
        name: str = "candidatehub",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self.metrics = {
            "store_calls": 0,
            "store_failures": 0,
            "cache_fallbacks": 0,
            "degraded_writes": 0,
            "errors_by_type": {},
            "operations": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"candidatehub_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def _operation(self, operation: str) -> dict:
        if operation not in self.metrics["operations"]:
            self.metrics["operations"][operation] = {"calls": 0, "failures": 0}
        return self.metrics["operations"][operation]

    def record_store_call(self, operation: str):
        """Record a call to the record store."""
        self.metrics["store_calls"] += 1
        self._operation(operation)["calls"] += 1

    def record_store_failure(self, operation: str, error_type: str):
        """Record a failed record store call."""
        self.metrics["store_failures"] += 1
        self._operation(operation)["failures"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def record_cache_fallback(self):
        """Record a read served from the cache instead of the store."""
        self.metrics["cache_fallbacks"] += 1

    def record_degraded_write(self):
        """Record a write that only reached the cache."""
        self.metrics["degraded_writes"] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = copy.deepcopy(self.metrics)
        for stats in metrics_copy["operations"].values():
            if stats["calls"] > 0:
                stats["failure_rate"] = round(stats["failures"] / stats["calls"], 3)

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total_calls = metrics["store_calls"]
        total_failures = metrics["store_failures"]
        overall_rate = 0
        if total_calls > 0:
            overall_rate = round((total_calls - total_failures) / total_calls * 100, 1)

        self.info("=== Record Store Metrics ===")
        self.info(f"Store calls: {total_calls - total_failures}/{total_calls} ({overall_rate}% success)")
        self.info(f"Cache fallbacks: {metrics['cache_fallbacks']}")
        self.info(f"Degraded writes: {metrics['degraded_writes']}")

        if metrics["operations"]:
            self.info("Operations:")
            for operation, stats in metrics["operations"].items():
                rate = stats.get("failure_rate", 0) * 100
                self.info(f"  {operation}: {stats['failures']}/{stats['calls']} failed ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "candidatehub",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None

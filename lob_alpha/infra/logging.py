"""
Logging for LOB Alpha Research System
=====================================

This module wraps Python's logging with what a research pipeline needs:
- Categorised records (data, features, signals, backtest, ...)
- Latency measurement of pipeline stages
- Optional JSON structured output for machine parsing
- Off-thread formatting through a queue listener

LOG TYPES:
- Audit logs: every simulated trade
- Performance logs: stage latencies (feature extraction, backtest)
- Data logs: ingestion results, skipped rows
- Debug logs: development only

Structured output is switched on through ``configure_logging`` so that
runs can be post-processed (grep, jq, log aggregation) without parsing
free-form text.
"""

import json
import logging
import logging.handlers
import sys
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from queue import Queue
from typing import Any, Deque, Dict, Optional


class LogCategory(Enum):
    """Log categories for filtering and routing."""
    DATA = "data"
    FEATURE = "feature"
    SIGNAL = "signal"
    BACKTEST = "backtest"
    METRICS = "metrics"
    STORAGE = "storage"
    SYSTEM = "system"
    AUDIT = "audit"
    PERFORMANCE = "performance"


@dataclass
class LatencyMeasurement:
    """
    Captures latency for a single pipeline operation.

    Uses time.perf_counter_ns(), nanosecond resolution.
    """
    operation: str
    start_ns: int
    end_ns: int = 0
    category: LogCategory = LogCategory.PERFORMANCE
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ns(self) -> int:
        return self.end_ns - self.start_ns

    @property
    def duration_us(self) -> float:
        return self.duration_ns / 1000.0

    @property
    def duration_ms(self) -> float:
        return self.duration_ns / 1_000_000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "duration_ns": self.duration_ns,
            "duration_ms": self.duration_ms,
            "category": self.category.value,
            "metadata": self.metadata,
        }


class LatencyTracker:
    """
    Tracks latency statistics for different operations.

    Keeps a bounded window per operation so long sessions do not grow
    without limit.
    """

    def __init__(self, window_size: int = 10000):
        self._window_size = window_size
        self._measurements: Dict[str, Deque[int]] = {}
        self._lock = threading.Lock()

    def record(self, measurement: LatencyMeasurement) -> None:
        """Record a latency measurement."""
        with self._lock:
            if measurement.operation not in self._measurements:
                self._measurements[measurement.operation] = deque(maxlen=self._window_size)
            self._measurements[measurement.operation].append(measurement.duration_ns)

    def get_stats(self, operation: str) -> Dict[str, float]:
        """
        Get latency statistics for an operation.

        Returns count, min, max, mean and the p50 / p99 percentiles.
        """
        with self._lock:
            return self._stats_unlocked(operation)

    def _stats_unlocked(self, operation: str) -> Dict[str, float]:
        if not self._measurements.get(operation):
            return {}

        measurements = sorted(self._measurements[operation])
        n = len(measurements)

        return {
            "count": n,
            "min_ns": measurements[0],
            "max_ns": measurements[-1],
            "mean_ns": sum(measurements) / n,
            "p50_ns": measurements[n // 2],
            "p99_ns": measurements[int(n * 0.99)] if n >= 100 else measurements[-1],
        }

    def get_all_stats(self) -> Dict[str, Dict[str, float]]:
        """Get statistics for all tracked operations."""
        with self._lock:
            return {op: self._stats_unlocked(op) for op in self._measurements}

    def clear(self) -> None:
        with self._lock:
            self._measurements.clear()


class StructuredFormatter(logging.Formatter):
    """
    JSON structured log formatter for machine parsing.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "category"):
            log_data["category"] = record.category
        if hasattr(record, "symbol"):
            log_data["symbol"] = record.symbol
        if hasattr(record, "latency_ns"):
            log_data["latency_ns"] = record.latency_ns
        if getattr(record, "extra_data", None):
            log_data["data"] = record.extra_data

        return json.dumps(log_data, default=str)


CONSOLE_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"


class AlphaLogger:
    """
    Categorised logger for pipeline components.

    Provides:
    - Categorised logging
    - Latency tracking integration
    - Context managers for timing
    - Trade audit records
    """

    _instance: Optional["AlphaLogger"] = None
    _latency_tracker: LatencyTracker = LatencyTracker()

    def __init__(self, name: str = "lob_alpha", level: int = logging.INFO):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._listener: Optional[logging.handlers.QueueListener] = None

        self._logger.handlers = []
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
        self._logger.addHandler(console)

    @classmethod
    def get_instance(cls) -> "AlphaLogger":
        """Shared logger used by every module of the package."""
        if cls._instance is None:
            cls._instance = AlphaLogger()
        return cls._instance

    @classmethod
    def get_latency_tracker(cls) -> LatencyTracker:
        """Access the shared latency tracker."""
        return cls._latency_tracker

    @property
    def std_logger(self) -> logging.Logger:
        return self._logger

    def configure(
        self,
        level: str = "INFO",
        structured: bool = False,
        log_file_path: Optional[str] = None,
    ) -> None:
        """
        Replace the handlers of the package logger.

        Records are put on a queue by the caller's thread and formatted and
        written by a QueueListener thread.
        """
        self.shutdown()

        formatter: logging.Formatter
        if structured:
            formatter = StructuredFormatter()
        else:
            formatter = logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)

        sinks = [logging.StreamHandler(sys.stderr)]
        if log_file_path:
            sinks.append(logging.FileHandler(log_file_path))
        for sink in sinks:
            sink.setFormatter(formatter)

        queue: Queue = Queue(-1)
        self._logger.handlers = [logging.handlers.QueueHandler(queue)]
        self._logger.setLevel(logging.getLevelName(level.upper()))

        self._listener = logging.handlers.QueueListener(queue, *sinks, respect_handler_level=True)
        self._listener.start()

    def shutdown(self) -> None:
        """Flush and stop the queue listener, if one is running."""
        if self._listener is not None:
            self._listener.stop()
            for handler in self._listener.handlers:
                handler.close()
            self._listener = None

    def log(
        self,
        level: int,
        message: str,
        category: LogCategory = LogCategory.SYSTEM,
        symbol: Optional[str] = None,
        **kwargs
    ) -> None:
        """
        Log a message with pipeline context.
        """
        extra = {
            "category": category.value,
            "extra_data": kwargs,
        }
        if symbol:
            extra["symbol"] = symbol
        if "latency_ns" in kwargs:
            extra["latency_ns"] = kwargs.pop("latency_ns")

        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs) -> None:
        self.log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.log(logging.ERROR, message, **kwargs)

    @contextmanager
    def measure_latency(
        self,
        operation: str,
        category: LogCategory = LogCategory.PERFORMANCE,
        log_level: int = logging.DEBUG,
        **metadata
    ):
        """
        Context manager to measure and log operation latency.

        Usage:
            with logger.measure_latency("generate_signals", symbol="AAPL"):
                ...
        """
        measurement = LatencyMeasurement(
            operation=operation,
            start_ns=time.perf_counter_ns(),
            category=category,
            metadata=metadata,
        )

        try:
            yield measurement
        finally:
            measurement.end_ns = time.perf_counter_ns()
            self._latency_tracker.record(measurement)

            self.log(
                log_level,
                f"{operation} completed in {measurement.duration_ms:.2f}ms",
                category=category,
                latency_ns=measurement.duration_ns,
                **metadata
            )

    def log_trade(
        self,
        symbol: str,
        side: str,
        quantity: float,
        price: float,
        **kwargs
    ) -> None:
        """Audit record for every simulated fill."""
        self.log(
            logging.DEBUG,
            f"TRADE: {side} {quantity:g} {symbol} @ {price:.4f}",
            category=LogCategory.AUDIT,
            symbol=symbol,
            side=side,
            quantity=quantity,
            price=price,
            **kwargs
        )

    def log_signal_batch(
        self,
        symbol: str,
        model_tag: str,
        count: int,
        mean_value: float,
        mean_confidence: float,
    ) -> None:
        """Summary record for one signal-generation pass."""
        self.log(
            logging.INFO,
            f"SIGNALS: {model_tag} {symbol} n={count} "
            f"mean={mean_value:+.4f} (conf: {mean_confidence:.2f})",
            category=LogCategory.SIGNAL,
            symbol=symbol,
            model_tag=model_tag,
            count=count,
        )


# Global logger instance
logger = AlphaLogger.get_instance()


def get_logger() -> AlphaLogger:
    """Get the package logger instance."""
    return logger


def configure_logging(config) -> None:
    """Apply the logging section of a SystemConfig."""
    logger.configure(
        level=config.log_level,
        structured=config.structured_logs,
        log_file_path=config.log_file_path,
    )


def get_latency_stats() -> Dict[str, Dict[str, float]]:
    """Get latency statistics for all tracked operations."""
    return AlphaLogger.get_latency_tracker().get_all_stats()

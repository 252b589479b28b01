"""
Centralized Logging Configuration
==================================
Provides consistent logging across all modules with structured output.

Design Decisions:
- Uses Python's built-in logging
- Logs to console and, optionally, to a file
- Includes timestamps and module names for traceability
- Text-generation calls get one structured JSON line each

Usage:
    from foodbank_ai.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Analysis started")
"""

import json
import logging
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional


def get_logger(
    name: str,
    log_file: Optional[str] = None,
    level: int = logging.INFO
) -> logging.Logger:
    """
    Create and configure a logger instance.

    Parameters
    ----------
    name : str
        Logger name (typically __name__ of the calling module)
    log_file : str, optional
        Path to log file. If None, logs only to console.
    level : int
        Logging level (default: INFO)

    Returns
    -------
    logging.Logger
        Configured logger instance

    Example
    -------
    >>> logger = get_logger(__name__)
    >>> logger.info("Supply gap analysis started")
    2026-02-04 10:30:00 | INFO     | foodbank_ai.supply_gap | Supply gap analysis started
    """
    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


class LogContext:
    """
    Bracket one engine step with start and finish log lines.

    Wall time comes from Timer and is reported in seconds. A step that
    raises is logged at ERROR and the exception still propagates.

    Usage:
        with LogContext(logger, "Generating 5 outreach emails for protein"):
            results = composer.dispatch(briefs)
    """

    def __init__(self, logger: logging.Logger, step: str):
        self.logger = logger
        self.step = step
        self.timer = Timer()

    def __enter__(self) -> "LogContext":
        self.logger.info(f"{self.step}...")
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.timer.__exit__()
        seconds = self.timer.elapsed_ms / 1000

        if exc_type is None:
            self.logger.info(f"{self.step} finished in {seconds:.2f}s")
        else:
            self.logger.error(f"{self.step} failed after {seconds:.2f}s: {exc_val}")
        return False


@dataclass
class LLMCallLog:
    """Structured log for a text-generation call."""

    module: str
    timestamp: str
    latency_ms: Optional[int] = None
    supplier_id: Optional[str] = None
    succeeded: bool = True
    validation_errors: List[str] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(
            {
                "module": self.module,
                "timestamp": self.timestamp,
                "latency_ms": self.latency_ms,
                "supplier_id": self.supplier_id,
                "succeeded": self.succeeded,
                "validation_errors": self.validation_errors,
            },
            default=str,
        )


_llm_logger = get_logger("foodbank_ai.llm_calls")


def log_llm_call(
    module: str,
    latency_ms: Optional[int] = None,
    supplier_id: Optional[str] = None,
    succeeded: bool = True,
    validation_errors: Optional[List[str]] = None,
) -> LLMCallLog:
    """Log a text-generation call as a single structured JSON line."""
    log = LLMCallLog(
        module=module,
        timestamp=datetime.now(timezone.utc).isoformat(),
        latency_ms=latency_ms,
        supplier_id=supplier_id,
        succeeded=succeeded,
        validation_errors=validation_errors or [],
    )
    _llm_logger.info(log.to_json())
    return log


class Timer:
    """Context manager for measuring latency."""

    def __init__(self):
        self.start: float = 0.0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)

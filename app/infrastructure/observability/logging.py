"""
Structured logging setup for the weekly aggregation worker.
Provides JSON-formatted logs with consistent fields for production monitoring.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging with JSON output for production.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_job_context,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # psycopg pool logs every connection checkout at DEBUG/INFO
    logging.getLogger("psycopg").setLevel(logging.WARNING)
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)


def _add_job_context(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag every entry emitted from the worker with the service name."""
    event_dict.setdefault("service", "weekly-aggregation")
    return event_dict


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_batch_summary(
    job: str,
    total_users: int,
    succeeded: int,
    failed: int,
    duration_ms: float,
    cancelled: int = 0,
):
    """Log batch run results with consistent fields."""
    logger = get_logger("batch")

    log_data = {
        "job": job,
        "total_users": total_users,
        "succeeded": succeeded,
        "failed": failed,
        "cancelled": cancelled,
        "duration_ms": round(duration_ms, 2),
    }

    if failed or cancelled:
        logger.warning("Batch completed with failures", **log_data)
    else:
        logger.info("Batch completed", **log_data)

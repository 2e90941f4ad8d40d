"""
Logging setup shared by every module.
Provides the application logger, correlation-aware adapters and an audit trail logger.
"""
import json
import logging
import sys
from typing import Any, Dict, Optional

from estatehub.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Guarantees every record carries a correlation_id so the formatter never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


def _build_logger(name: str) -> logging.Logger:
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        log.addHandler(handler)
    log.setLevel(settings.LOG_LEVEL.upper())
    log.propagate = False
    return log


logger = _build_logger("estatehub")
_audit_logger = _build_logger("estatehub.audit")


def get_logger_with_correlation(correlation_id: Optional[str]) -> logging.LoggerAdapter:
    """Returns an adapter that stamps the given correlation ID on every record."""
    return logging.LoggerAdapter(logger, {"correlation_id": correlation_id or "-"})


def audit_log(action: str, user: str, resource: str, details: Optional[Dict[str, Any]] = None) -> None:
    """
    Writes a structured audit entry.
    Details are serialized as JSON so entries stay greppable in aggregated logs.
    """
    details = details or {}
    _audit_logger.info(
        "action=%s user=%s resource=%s details=%s",
        action,
        user,
        resource,
        json.dumps(details, default=str, sort_keys=True),
        extra={"correlation_id": details.get("correlation_id", "-")}
    )

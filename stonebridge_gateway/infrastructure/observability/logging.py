"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "stonebridge-gateway"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transfer(
    request_id: str,
    user_id: int,
    outcome: str,
    amount_cents: int,
    duration_ms: float,
    reason: Optional[str] = None,
) -> None:
    """Log structured transfer outcome for reconciliation"""
    logging.info(
        "Transfer completed" if outcome == "completed" else "Transfer rejected",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "transfer",
            "outcome": outcome,
            "amount_cents": amount_cents,
            "reason": reason,
            "duration_ms": duration_ms,
        },
    )


def log_application(request_id: str, user_id: int, kind: str, application_id: int, offer_id: int) -> None:
    """Log a submitted loan or mortgage application"""
    logging.info(
        "Application submitted",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "application_submitted",
            "kind": kind,
            "application_id": application_id,
            "offer_id": offer_id,
        },
    )

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
        log_record["service"] = "dealdesk"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_underwriting(
    request_id: str,
    verdict: str,
    pti: Optional[float],
    ltv: Optional[float],
    reason_count: int,
    duration_ms: float,
) -> None:
    """Log structured underwriting outcome for analysis"""
    logging.info(
        "Underwriting completed",
        extra={
            "request_id": request_id,
            "step": "underwriting_complete",
            "verdict": verdict,
            "pti": pti,
            "ltv": ltv,
            "reason_count": reason_count,
            "duration_ms": duration_ms,
        },
    )


def log_affordability(
    request_id: str,
    found: bool,
    sale_price: Optional[float],
    term_weeks: Optional[int],
    candidates_evaluated: int,
    duration_ms: float,
) -> None:
    """Log structured affordability search outcome"""
    logging.info(
        "Affordability search completed",
        extra={
            "request_id": request_id,
            "step": "affordability_complete",
            "outcome": "found" if found else "none",
            "sale_price": sale_price,
            "term_weeks": term_weeks,
            "candidates_evaluated": candidates_evaluated,
            "duration_ms": duration_ms,
        },
    )


def log_request(
    request_id: Optional[str],
    method: str,
    endpoint: str,
    status: int,
    duration_ms: float,
) -> None:
    """One access line per HTTP request; health and metrics scrapes log at DEBUG"""
    level = logging.DEBUG if endpoint in ("/health", "/metrics") else logging.INFO
    logging.log(
        level,
        "Request completed",
        extra={
            "request_id": request_id,
            "step": "http_request",
            "method": method,
            "endpoint": endpoint,
            "status": status,
            "duration_ms": duration_ms,
        },
    )

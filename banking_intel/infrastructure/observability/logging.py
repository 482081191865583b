"""Structured JSON logging for report generation"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from banking_intel.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on the root logger"""
    logger = logging.getLogger()
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_report_requested(request_id: str, user_id: str, timeframe: str, report_format: str, detailed: bool) -> None:
    logging.info(
        "Report requested",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "report_requested",
            "timeframe": timeframe,
            "report_format": report_format,
            "detailed": detailed,
        },
    )


def log_report(
    request_id: str,
    user_id: str,
    section_count: int,
    fallback_count: int,
    duration_ms: float,
    from_cache: bool,
) -> None:
    """Log structured report outcome for analysis"""
    logging.info(
        "Report generated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "report_complete",
            "section_count": section_count,
            "fallback_count": fallback_count,
            "duration_ms": duration_ms,
            "from_cache": from_cache,
        },
    )

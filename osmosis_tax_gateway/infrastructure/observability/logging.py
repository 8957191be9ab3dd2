"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from osmosis_tax_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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

    # httpx logs each request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_fetch(
    address: str,
    count: int,
    pages: int,
    complete: bool,
    duration_ms: float,
) -> None:
    """Log structured outcome of one history fetch"""
    logging.getLogger("osmosis_tax_gateway.fetch").info(
        "Transaction history fetched",
        extra={
            "address": address,
            "step": "fetch_complete",
            "transaction_count": count,
            "pages_fetched": pages,
            "complete": complete,
            "duration_ms": duration_ms,
        },
    )


def log_export(request_id: str, address: str, rows: int, complete: bool) -> None:
    """Log structured outcome of one report export"""
    logging.getLogger("osmosis_tax_gateway.export").info(
        "Report exported",
        extra={
            "request_id": request_id,
            "address": address,
            "step": "export_complete",
            "row_count": rows,
            "complete": complete,
        },
    )

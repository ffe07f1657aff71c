"""Structured JSON logging"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name"""

    def __init__(self, *args: Any, service_name: str = "split-ledger", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "split-ledger") -> None:
    """Configure structured JSON logging on the root logger"""
    logger = logging.getLogger()
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_posting(
    request_id: str,
    transaction_id: str,
    kind: str,
    amount_cents: int,
    replayed: bool = False,
) -> None:
    """Log the outcome of a posting request"""
    logging.getLogger("split_ledger.postings").info(
        "Transaction recorded" if not replayed else "Idempotent replay",
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "kind": kind,
            "amount_cents": amount_cents,
            "step": "posting_complete",
            "replayed": replayed,
        },
    )

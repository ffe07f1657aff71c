"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Header, Request

from split_ledger.config import Settings
from split_ledger.domain.exceptions import InvalidIdempotencyKeyError
from split_ledger.services.ledger_service import LedgerService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings(request: Request) -> Settings:
    """Configuration the running app was built with"""
    return request.app.state.settings


def get_ledger_service(request: Request) -> LedgerService:
    """Provide the ledger service owned by the running app"""
    return request.app.state.ledger_service


def get_idempotency_key(
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    config: Settings = Depends(get_settings),
) -> Optional[str]:
    """Optional Idempotency-Key header, bounded by the app's configured length"""
    if idempotency_key is None:
        return None
    if not 1 <= len(idempotency_key) <= config.idempotency_key_max_length:
        raise InvalidIdempotencyKeyError(
            f"Idempotency-Key must be 1-{config.idempotency_key_max_length} characters"
        )
    return idempotency_key

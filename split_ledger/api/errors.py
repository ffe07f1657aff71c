"""RFC 7807 problem responses for domain and validation errors"""

import logging
from typing import Dict, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from split_ledger.api.dependencies import get_request_id
from split_ledger.api.v1.schemas import ProblemDetail
from split_ledger.domain.exceptions import (
    DomainException,
    IdempotencyConflictError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidIdempotencyKeyError,
    InvalidPartyError,
    LedgerIntegrityError,
    OverSettlementError,
    SelfSettlementError,
    TransactionNotFoundError,
)
from split_ledger.infrastructure.observability.metrics import record_rejection

PROBLEM_CONTENT_TYPE = "application/problem+json"

# exception -> (status, type, title)
PROBLEM_TYPES: Dict[Type[DomainException], Tuple[int, str, str]] = {
    InvalidAmountError: (422, "invalid-amount", "Invalid amount"),
    InvalidPartyError: (422, "validation-error", "Invalid request body"),
    InvalidCategoryError: (422, "validation-error", "Invalid request body"),
    InvalidIdempotencyKeyError: (422, "validation-error", "Invalid request headers"),
    SelfSettlementError: (422, "self-settlement", "Cannot settle with yourself"),
    OverSettlementError: (422, "over-settlement", "Over-settlement"),
    IdempotencyConflictError: (409, "idempotency-conflict", "Idempotency conflict"),
    TransactionNotFoundError: (404, "not-found", "Resource not found"),
}


def problem_response(status: int, type_: str, title: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=ProblemDetail(type=type_, title=title, detail=detail, status=status).model_dump(),
        media_type=PROBLEM_CONTENT_TYPE,
    )


def _lookup(exc: DomainException) -> Tuple[int, str, str]:
    for exc_type in type(exc).__mro__:
        if exc_type in PROBLEM_TYPES:
            return PROBLEM_TYPES[exc_type]
    return 500, "internal-error", "Internal server error"


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    request_id = get_request_id(request)

    if isinstance(exc, LedgerIntegrityError):
        logging.error(f"Ledger integrity failure: {exc}", extra={"request_id": request_id})
        return problem_response(500, "internal-error", "Internal server error", "Internal server error")

    status, type_, title = _lookup(exc)
    if status == 500:
        logging.error(f"Unhandled domain error: {exc}", extra={"request_id": request_id})
        return problem_response(status, type_, title, "Internal server error")

    if status != 404:
        record_rejection(type_)
    logging.warning(f"Request rejected: {exc}", extra={"request_id": request_id, "problem_type": type_})
    return problem_response(status, type_, title, str(exc))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    record_rejection("validation-error")
    fields = ", ".join(".".join(str(p) for p in err.get("loc", ())) for err in exc.errors())
    logging.warning(f"Invalid request: {fields}", extra={"request_id": get_request_id(request)})
    return problem_response(422, "validation-error", "Invalid request body", f"Invalid fields: {fields}")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return problem_response(404, "not-found", "Resource not found", str(exc.detail))
    return problem_response(exc.status_code, "http-error", "Request failed", str(exc.detail))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

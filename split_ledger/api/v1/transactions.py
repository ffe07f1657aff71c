"""POST /transactions, GET /transactions - group expenses and transaction history"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response

from split_ledger.api.dependencies import get_idempotency_key, get_ledger_service, get_request_id
from split_ledger.api.v1.schemas import (
    CompleteSummarySchema,
    EntrySchema,
    GroupExpenseRequest,
    GroupExpenseResponse,
    TransactionDetailResponse,
    TransactionSchema,
    transaction_to_schema,
)
from split_ledger.infrastructure.observability.logging import log_posting
from split_ledger.infrastructure.observability.metrics import idempotent_replay_counter, record_posting
from split_ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.post("/transactions", response_model=GroupExpenseResponse, status_code=201)
def create_group_expense(
    request_body: GroupExpenseRequest,
    request: Request,
    response: Response,
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Record an expense paid by one party and shared equally.

    Flow:
    1. Replay the cached response if the idempotency key was seen with the same body
    2. Post the five balanced entries
    3. Return the transaction and the recomputed summary

    An idempotent replay answers 200 instead of 201.
    """
    request_id = get_request_id(request)

    result = service.record_group_expense(
        request_body.payer_id,
        request_body.amount,
        request_body.category,
        idempotency_key=idempotency_key,
    )

    transaction = result.transaction
    if result.replayed:
        response.status_code = 200
        idempotent_replay_counter.inc()
    else:
        record_posting(transaction.kind.value, transaction.amount_cents)
    log_posting(request_id, transaction.id, transaction.kind.value, transaction.amount_cents, result.replayed)

    return GroupExpenseResponse(
        transaction=transaction_to_schema(transaction),
        summary=CompleteSummarySchema.from_domain(result.summary),
    )


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(service: LedgerService = Depends(get_ledger_service)):
    """All group expenses and settlements, oldest first"""
    return [transaction_to_schema(t) for t in service.list_transactions()]


@router.get("/transactions/{transaction_id}", response_model=TransactionDetailResponse)
def get_transaction(transaction_id: str, service: LedgerService = Depends(get_ledger_service)):
    """One transaction with the ledger entries it produced"""
    transaction, entries = service.get_transaction(transaction_id)
    logging.debug("Fetched transaction", extra={"transaction_id": transaction_id, "entry_count": len(entries)})

    return TransactionDetailResponse(
        transaction=transaction_to_schema(transaction),
        entries=[EntrySchema.from_domain(e) for e in entries],
    )

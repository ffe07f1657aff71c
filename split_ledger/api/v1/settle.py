"""POST /settle - repay the current net due"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from split_ledger.api.dependencies import get_idempotency_key, get_ledger_service, get_request_id
from split_ledger.api.v1.schemas import (
    CompleteSummarySchema,
    SettlementRequest,
    SettlementResponse,
    transaction_to_schema,
)
from split_ledger.infrastructure.observability.logging import log_posting
from split_ledger.infrastructure.observability.metrics import idempotent_replay_counter, record_posting
from split_ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.post("/settle", response_model=SettlementResponse, status_code=201)
def create_settlement(
    request_body: SettlementRequest,
    request: Request,
    response: Response,
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Record a settlement from the debtor to the creditor.

    Rejected with 422 when settling with yourself, when nothing is owed,
    when paying in the wrong direction, or when paying more than is owed.
    """
    request_id = get_request_id(request)

    result = service.record_settlement(
        request_body.from_user_id,
        request_body.to_user_id,
        request_body.amount,
        idempotency_key=idempotency_key,
    )

    settlement = result.transaction
    if result.replayed:
        response.status_code = 200
        idempotent_replay_counter.inc()
    else:
        record_posting(settlement.kind.value, settlement.amount_cents)
    log_posting(request_id, settlement.id, settlement.kind.value, settlement.amount_cents, result.replayed)

    return SettlementResponse(
        settlement=transaction_to_schema(settlement),
        summary=CompleteSummarySchema.from_domain(result.summary),
    )

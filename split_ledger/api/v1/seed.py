"""POST /seed/init - reset the ledger and open both wallets"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from split_ledger.api.dependencies import get_ledger_service, get_settings
from split_ledger.api.v1.schemas import CompleteSummarySchema, SeedRequest
from split_ledger.config import Settings
from split_ledger.infrastructure.observability.metrics import seed_counter
from split_ledger.services.ledger_service import LedgerService

router = APIRouter()


def _wallet_cents(value: Optional[Decimal], default_cents: int) -> int:
    return default_cents if value is None else int(value * 100)


@router.post("/seed/init", response_model=CompleteSummarySchema)
def seed_init(
    request_body: Optional[SeedRequest] = Body(None),
    demo: bool = Query(False, description="Also post three sample expenses"),
    service: LedgerService = Depends(get_ledger_service),
    config: Settings = Depends(get_settings),
):
    """
    Discard all history and idempotency keys, then seed both wallets.

    Test/demo convenience; not part of normal operation.
    """
    body = request_body or SeedRequest()
    summary = service.seed_wallets(
        _wallet_cents(body.wallet_a, config.default_wallet_cents),
        _wallet_cents(body.wallet_b, config.default_wallet_cents),
        demo=demo,
    )
    seed_counter.inc()
    return CompleteSummarySchema.from_domain(summary)

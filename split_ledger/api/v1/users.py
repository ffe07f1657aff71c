"""GET /users, /users-cents, /summary, /who-owes-who - read-only projections"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query

from split_ledger.api.dependencies import get_ledger_service
from split_ledger.api.v1.schemas import (
    CompactSummarySchema,
    CompleteSummarySchema,
    NetDueSchema,
    UserSummaryCentsSchema,
    UserSummarySchema,
    UsersCentsResponse,
    WhoOwesWhoSchema,
)
from split_ledger.domain import projections
from split_ledger.domain.models import Party
from split_ledger.domain.money import format_currency
from split_ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("/users", response_model=Union[CompleteSummarySchema, UserSummarySchema])
def get_users(
    user_id: Optional[Party] = Query(None, alias="userId", description="Restrict to one party"),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Wallet balances, budgets and net due for both parties.

    With `userId`, returns that party's summary only.
    """
    summary = service.summary()
    if user_id is not None:
        return UserSummarySchema.from_domain(summary.for_party(user_id))
    return CompleteSummarySchema.from_domain(summary)


@router.get("/users-cents", response_model=UsersCentsResponse)
def get_users_cents(service: LedgerService = Depends(get_ledger_service)):
    """Both parties' summaries in integer cents"""
    entries = service.entries()
    return UsersCentsResponse(
        users=[UserSummaryCentsSchema.from_domain(projections.user_summary_cents(p, entries)) for p in Party]
    )


@router.get("/summary", response_model=CompactSummarySchema)
def get_compact_summary(
    user_id: Party = Query(..., alias="userId"),
    service: LedgerService = Depends(get_ledger_service),
):
    """One party's wallet and budget plus their net position"""
    entries = service.entries()
    user = projections.user_summary(user_id, entries)
    base = UserSummarySchema.from_domain(user)

    return CompactSummarySchema(
        **base.model_dump(),
        net_position=NetDueSchema.from_domain(projections.net_position(user_id, entries)),
    )


@router.get("/who-owes-who", response_model=WhoOwesWhoSchema)
def get_who_owes_who(service: LedgerService = Depends(get_ledger_service)):
    """Simplified debt summary: debtor, creditor and amount"""
    due = projections.net_due(service.entries())
    return WhoOwesWhoSchema(owes=due.owes, to=due.to, amount=format_currency(due.amount_cents))

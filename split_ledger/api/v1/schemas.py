"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from split_ledger.domain.models import (
    Category,
    CompleteSummary,
    GroupExpense,
    LedgerEntry,
    NetDue,
    NetPosition,
    Party,
    Transaction,
    UserSummary,
    UserSummaryCents,
)
from split_ledger.domain.money import format_currency

MONEY_PATTERN = r"^\d+\.\d{2}$"


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_money(value: str) -> str:
    # Upper bound is configurable per app and enforced by the ledger service
    if Decimal(value) <= 0:
        raise ValueError("Amount must be positive")
    return value


# Requests


class GroupExpenseRequest(CamelModel):
    """Request body for POST /transactions"""

    payer_id: Party = Field(..., description="Party who paid")
    amount: str = Field(..., pattern=MONEY_PATTERN, description="Amount with exactly 2 decimals, e.g. 120.00")
    category: Category

    @field_validator("amount")
    @classmethod
    def amount_in_range(cls, value: str) -> str:
        return _check_money(value)


class SettlementRequest(CamelModel):
    """Request body for POST /settle"""

    from_user_id: Party
    to_user_id: Party
    amount: str = Field(..., pattern=MONEY_PATTERN)

    @field_validator("amount")
    @classmethod
    def amount_in_range(cls, value: str) -> str:
        return _check_money(value)


class SeedRequest(CamelModel):
    """Request body for POST /seed/init; balances in dollars, omitted means the configured default"""

    wallet_a: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    wallet_b: Optional[Decimal] = Field(None, ge=0, decimal_places=2)


# Responses


class UserSummarySchema(CamelModel):
    user_id: Party
    wallet_balance: str
    budget_by_category: Dict[Category, str]

    @classmethod
    def from_domain(cls, summary: UserSummary) -> "UserSummarySchema":
        return cls(
            user_id=summary.party,
            wallet_balance=format_currency(summary.wallet_balance_cents),
            budget_by_category={c: format_currency(v) for c, v in summary.budget_by_category.items()},
        )


class NetDueSchema(CamelModel):
    owes: Optional[Party] = None
    amount: str

    @classmethod
    def from_domain(cls, due: NetDue | NetPosition) -> "NetDueSchema":
        return cls(owes=due.owes, amount=format_currency(due.amount_cents))


class CompleteSummarySchema(CamelModel):
    """Response for GET /users"""

    users: List[UserSummarySchema]
    net_due: NetDueSchema

    @classmethod
    def from_domain(cls, summary: CompleteSummary) -> "CompleteSummarySchema":
        return cls(
            users=[UserSummarySchema.from_domain(u) for u in summary.users],
            net_due=NetDueSchema.from_domain(summary.net_due),
        )


class CompactSummarySchema(UserSummarySchema):
    """Response for GET /summary"""

    net_position: NetDueSchema


class WhoOwesWhoSchema(CamelModel):
    """Response for GET /who-owes-who"""

    owes: Optional[Party] = None
    to: Optional[Party] = None
    amount: str


class WalletCentsSchema(CamelModel):
    balance_cents: int


class CategorySpendCentsSchema(CamelModel):
    name: str
    spent_cents: int


class NetCentsSchema(CamelModel):
    owes: int
    is_owed: int


class UserSummaryCentsSchema(CamelModel):
    user_id: Party
    wallet: WalletCentsSchema
    spend_by_category: List[CategorySpendCentsSchema]
    net_between_users_cents: NetCentsSchema

    @classmethod
    def from_domain(cls, summary: UserSummaryCents) -> "UserSummaryCentsSchema":
        return cls(
            user_id=summary.party,
            wallet=WalletCentsSchema(balance_cents=summary.balance_cents),
            spend_by_category=[
                CategorySpendCentsSchema(name=s.name, spent_cents=s.spent_cents) for s in summary.spend_by_category
            ],
            net_between_users_cents=NetCentsSchema(owes=summary.owes_cents, is_owed=summary.is_owed_cents),
        )


class UsersCentsResponse(CamelModel):
    """Response for GET /users-cents"""

    users: List[UserSummaryCentsSchema]


class GroupExpenseSchema(CamelModel):
    id: str
    type: Literal["GROUP"] = "GROUP"
    parties: List[Party]
    payer_id: Party
    amount: str
    category: Category
    per_user_share: str
    remainder: str
    created_at: str


class SettlementSchema(CamelModel):
    id: str
    type: Literal["SETTLEMENT"] = "SETTLEMENT"
    parties: List[Party]
    from_user_id: Party
    to_user_id: Party
    amount: str
    created_at: str


TransactionSchema = Union[GroupExpenseSchema, SettlementSchema]


def transaction_to_schema(transaction: Transaction) -> TransactionSchema:
    if isinstance(transaction, GroupExpense):
        return GroupExpenseSchema(
            id=transaction.id,
            parties=transaction.parties,
            payer_id=transaction.payer,
            amount=format_currency(transaction.amount_cents),
            category=transaction.category,
            per_user_share=format_currency(transaction.per_party_share_cents),
            remainder=format_currency(transaction.remainder_cents),
            created_at=transaction.created_at.isoformat(),
        )
    return SettlementSchema(
        id=transaction.id,
        parties=transaction.parties,
        from_user_id=transaction.from_party,
        to_user_id=transaction.to_party,
        amount=format_currency(transaction.amount_cents),
        created_at=transaction.created_at.isoformat(),
    )


class EntrySchema(CamelModel):
    id: str
    tx_id: str
    tx_type: str
    account: str
    user_id: Party
    category: Optional[Category] = None
    delta: str
    created_at: str

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "EntrySchema":
        return cls(
            id=entry.id,
            tx_id=entry.transaction_id,
            tx_type=entry.transaction_kind.value,
            account=entry.account.key,
            user_id=entry.party,
            category=entry.category,
            delta=format_currency(entry.delta_cents),
            created_at=entry.created_at.isoformat(),
        )


class GroupExpenseResponse(CamelModel):
    """Response for POST /transactions"""

    transaction: GroupExpenseSchema
    summary: CompleteSummarySchema


class SettlementResponse(CamelModel):
    """Response for POST /settle"""

    settlement: SettlementSchema
    summary: CompleteSummarySchema


class TransactionDetailResponse(CamelModel):
    """Response for GET /transactions/{transaction_id}"""

    transaction: TransactionSchema
    entries: List[EntrySchema]


class ProblemDetail(BaseModel):
    """RFC 7807 problem body"""

    type: str
    title: str
    detail: str
    status: int


PROBLEM_RESPONSES = {
    404: {"model": ProblemDetail, "description": "Unknown resource"},
    409: {"model": ProblemDetail, "description": "Idempotency key reused with a different body"},
    422: {"model": ProblemDetail, "description": "Invalid request or rejected posting"},
}

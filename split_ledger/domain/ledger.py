"""Double-entry posting engine for group expenses and settlements"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from split_ledger.domain.exceptions import (
    InvalidAmountError,
    MissingMirrorError,
    SelfSettlementError,
    UnbalancedEntriesError,
)
from split_ledger.domain.models import (
    Account,
    AccountKind,
    Category,
    LedgerEntry,
    Party,
    TransactionKind,
)
from split_ledger.domain.money import AmountLike, MAX_AMOUNT_CENTS, split_equally, to_cents

logger = logging.getLogger(__name__)

SEED_TRANSACTION_ID = "initial"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _entry(
    transaction_id: str,
    kind: TransactionKind,
    account: Account,
    delta_cents: int,
    created_at: datetime,
) -> LedgerEntry:
    return LedgerEntry(
        id=str(uuid.uuid4()),
        transaction_id=transaction_id,
        transaction_kind=kind,
        account=account,
        party=account.party,
        category=account.category,
        delta_cents=delta_cents,
        created_at=created_at,
    )


def post_group_expense(
    payer: Party | str,
    amount: AmountLike,
    category: Category | str,
    now: Optional[datetime] = None,
    max_cents: int = MAX_AMOUNT_CENTS,
) -> List[LedgerEntry]:
    """
    Build the balanced entry set for an expense paid by one party and shared equally.

    Entries (5):
    - CASH(payer)                -amount
    - EXPENSE(payer, category)   +share + remainder
    - EXPENSE(other, category)   +share
    - RECEIVABLE(payer, other)   +share
    - PAYABLE(other, payer)      -share

    The payer absorbs the odd cent of an uneven split in their own expense line,
    so the other party never owes more than their floor share and the set sums
    to exactly zero.

    Example:
        A pays 100.01 food → A food 50.01, B food 50.00, B owes A 50.00
    """
    payer = Party.parse(payer)
    category = Category.parse(category)
    amount_cents = to_cents(amount, max_cents)

    other = payer.other
    split = split_equally(amount_cents)
    tx_id = str(uuid.uuid4())
    created_at = now or _utcnow()
    kind = TransactionKind.GROUP

    entries = [
        _entry(tx_id, kind, Account.cash(payer), -amount_cents, created_at),
        _entry(tx_id, kind, Account.expense(payer, category), split.share_cents + split.remainder_cents, created_at),
        _entry(tx_id, kind, Account.expense(other, category), split.share_cents, created_at),
        _entry(tx_id, kind, Account.receivable(payer, other), split.share_cents, created_at),
        _entry(tx_id, kind, Account.payable(other, payer), -split.share_cents, created_at),
    ]

    validate_entries(entries)
    return entries


def post_settlement(
    from_party: Party | str,
    to_party: Party | str,
    amount: AmountLike,
    now: Optional[datetime] = None,
    max_cents: int = MAX_AMOUNT_CENTS,
) -> List[LedgerEntry]:
    """
    Build the balanced entry set for a cash repayment between the parties.

    Entries (4):
    - CASH(from)               -amount
    - CASH(to)                 +amount
    - RECEIVABLE(to, from)     -amount
    - PAYABLE(from, to)        +amount

    Settlements never touch EXPENSE accounts. Whether the debtor actually owes
    this much is checked by the caller before posting.
    """
    from_party = Party.parse(from_party)
    to_party = Party.parse(to_party)
    amount_cents = to_cents(amount, max_cents)

    if from_party == to_party:
        raise SelfSettlementError("Cannot settle with yourself")

    tx_id = str(uuid.uuid4())
    created_at = now or _utcnow()
    kind = TransactionKind.SETTLEMENT

    entries = [
        _entry(tx_id, kind, Account.cash(from_party), -amount_cents, created_at),
        _entry(tx_id, kind, Account.cash(to_party), amount_cents, created_at),
        _entry(tx_id, kind, Account.receivable(to_party, from_party), -amount_cents, created_at),
        _entry(tx_id, kind, Account.payable(from_party, to_party), amount_cents, created_at),
    ]

    validate_entries(entries)
    return entries


def build_seed_entries(
    wallet_a_cents: int,
    wallet_b_cents: int,
    now: Optional[datetime] = None,
) -> List[LedgerEntry]:
    """
    Opening CASH entries for both parties.

    Seed entries are the only unbalanced set in the ledger: they bring money
    into the two wallets from outside. Zero balances are allowed.
    """
    for cents in (wallet_a_cents, wallet_b_cents):
        if isinstance(cents, bool) or not isinstance(cents, int):
            raise InvalidAmountError("Wallet balances must be integer cents")
        if cents < 0:
            raise InvalidAmountError("Wallet balances cannot be negative")

    created_at = now or _utcnow()
    return [
        _entry(SEED_TRANSACTION_ID, TransactionKind.INITIAL, Account.cash(Party.A), wallet_a_cents, created_at),
        _entry(SEED_TRANSACTION_ID, TransactionKind.INITIAL, Account.cash(Party.B), wallet_b_cents, created_at),
    ]


def validate_entries(entries: Sequence[LedgerEntry]) -> None:
    """
    Check that an entry set is balanced and its inter-party debt is mirrored.

    Raises UnbalancedEntriesError if deltas don't sum to zero, and
    MissingMirrorError if any RECEIVABLE(X, Y) lacks a PAYABLE(Y, X) with the
    exactly negated delta. Either one means a posting bug, not bad input.
    """
    total = sum(e.delta_cents for e in entries)
    if total != 0:
        logger.error("Unbalanced entry set", extra={"step": "validate_entries", "total_cents": total})
        raise UnbalancedEntriesError(f"Transaction not balanced: total delta = {total} cents")

    debt_totals: Dict[Account, int] = defaultdict(int)
    for entry in entries:
        if entry.account.kind in (AccountKind.RECEIVABLE, AccountKind.PAYABLE):
            debt_totals[entry.account] += entry.delta_cents

    for account, delta in debt_totals.items():
        if account.kind is not AccountKind.RECEIVABLE:
            continue
        mirror = account.mirror
        if mirror not in debt_totals:
            raise MissingMirrorError(f"Missing corresponding {mirror.key} entry for {account.key}")
        if debt_totals[mirror] != -delta:
            raise MissingMirrorError(
                f"{account.key} and {mirror.key} not mirrored: {delta} + {debt_totals[mirror]}"
            )

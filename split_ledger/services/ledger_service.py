"""Ledger service - serialises postings and enforces pre-posting business rules"""

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from split_ledger.domain import ledger, projections
from split_ledger.domain.exceptions import (
    IdempotencyConflictError,
    OverSettlementError,
    TransactionNotFoundError,
)
from split_ledger.domain.models import (
    Category,
    CompleteSummary,
    GroupExpense,
    LedgerEntry,
    Party,
    Settlement,
    Transaction,
)
from split_ledger.domain.money import AmountLike, MAX_AMOUNT_CENTS, format_currency, split_equally, to_cents
from split_ledger.infrastructure.store.base import EntryStore
from split_ledger.infrastructure.store.idempotency import IdempotencyCache

logger = logging.getLogger(__name__)

DEMO_EXPENSES: List[Tuple[Party, str, Category]] = [
    (Party.A, "120.00", Category.FOOD),
    (Party.B, "80.00", Category.GROCERIES),
    (Party.A, "50.00", Category.TRANSPORT),
]


@dataclass
class PostingResult:
    """Recorded transaction with the summary computed right after it"""

    transaction: Transaction
    summary: CompleteSummary
    replayed: bool = False


def _fingerprint(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


class LedgerService:
    """
    Write path for the ledger.

    Every mutation runs under one re-entrant lock covering the idempotency
    check, the settlement rule, posting and the store append, so two identical
    concurrent requests can never both post.
    """

    def __init__(self, store: EntryStore, idempotency: IdempotencyCache, max_amount_cents: int = MAX_AMOUNT_CENTS):
        self.store = store
        self.idempotency = idempotency
        self.max_amount_cents = max_amount_cents
        self._write_lock = threading.RLock()

    # Reads

    def entries(self) -> List[LedgerEntry]:
        return self.store.all()

    def summary(self) -> CompleteSummary:
        return projections.complete_summary(self.store.all())

    def list_transactions(self) -> List[Transaction]:
        return self.store.transactions()

    def get_transaction(self, transaction_id: str) -> Tuple[Transaction, List[LedgerEntry]]:
        transaction = self.store.get_transaction(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        return transaction, self.store.entries_for(transaction_id)

    # Writes

    def record_group_expense(
        self,
        payer: Party | str,
        amount: AmountLike,
        category: Category | str,
        idempotency_key: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PostingResult:
        """Post a shared expense paid by `payer` and split equally"""
        payer = Party.parse(payer)
        category = Category.parse(category)
        amount_cents = to_cents(amount, self.max_amount_cents)
        fingerprint = _fingerprint(
            {"kind": "GROUP", "payer": payer.value, "amount_cents": amount_cents, "category": category.value}
        )

        with self._write_lock:
            cached = self._replay(idempotency_key, fingerprint)
            if cached is not None:
                return cached

            entries = ledger.post_group_expense(payer, amount, category, now=now, max_cents=self.max_amount_cents)
            split = split_equally(amount_cents)
            transaction = GroupExpense(
                id=entries[0].transaction_id,
                payer=payer,
                amount_cents=amount_cents,
                category=category,
                per_party_share_cents=split.share_cents,
                remainder_cents=split.remainder_cents,
                created_at=entries[0].created_at,
            )
            return self._commit(entries, transaction, idempotency_key, fingerprint)

    def record_settlement(
        self,
        from_party: Party | str,
        to_party: Party | str,
        amount: AmountLike,
        idempotency_key: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PostingResult:
        """
        Post a repayment from the debtor to the creditor.

        Rejected before posting when nothing is owed, when `from_party` is not
        the debtor, or when the amount exceeds the current net due.
        """
        from_party = Party.parse(from_party)
        to_party = Party.parse(to_party)
        amount_cents = to_cents(amount, self.max_amount_cents)
        fingerprint = _fingerprint(
            {"kind": "SETTLEMENT", "from": from_party.value, "to": to_party.value, "amount_cents": amount_cents}
        )

        with self._write_lock:
            cached = self._replay(idempotency_key, fingerprint)
            if cached is not None:
                return cached

            # Builds (and validates) the entries first so self-settlement is
            # reported as such rather than as a direction problem
            entries = ledger.post_settlement(from_party, to_party, amount, now=now, max_cents=self.max_amount_cents)
            self._check_settlement_allowed(from_party, to_party, amount_cents)

            transaction = Settlement(
                id=entries[0].transaction_id,
                from_party=from_party,
                to_party=to_party,
                amount_cents=amount_cents,
                created_at=entries[0].created_at,
            )
            return self._commit(entries, transaction, idempotency_key, fingerprint)

    def seed_wallets(
        self,
        wallet_a_cents: int,
        wallet_b_cents: int,
        demo: bool = False,
        now: Optional[datetime] = None,
    ) -> CompleteSummary:
        """Reset everything, then open both wallets; demo adds three sample expenses"""
        seed = ledger.build_seed_entries(wallet_a_cents, wallet_b_cents, now=now)

        with self._write_lock:
            self.reset()
            self.store.append_seed(seed)
            if demo:
                for payer, amount, category in DEMO_EXPENSES:
                    self.record_group_expense(payer, amount, category, now=now)

        logger.info(
            "Wallets seeded",
            extra={"step": "seed", "wallet_a_cents": wallet_a_cents, "wallet_b_cents": wallet_b_cents, "demo": demo},
        )
        return self.summary()

    def reset(self) -> None:
        """Discard all entries, transaction summaries and cached idempotent responses"""
        with self._write_lock:
            self.store.clear()
            self.idempotency.clear()

    # Internals

    def _check_settlement_allowed(self, from_party: Party, to_party: Party, amount_cents: int) -> None:
        due = projections.net_due(self.store.all())

        if due.owes is None:
            raise OverSettlementError("Over-settlement: No money is owed between users")
        if due.owes != from_party:
            raise OverSettlementError(
                f"Over-settlement: {from_party.value} does not owe {to_party.value}, "
                "cannot settle in this direction"
            )
        if amount_cents > due.amount_cents:
            raise OverSettlementError(
                f"Over-settlement: Attempted to settle {format_currency(amount_cents)} "
                f"but only {format_currency(due.amount_cents)} is owed"
            )

    def _replay(self, key: Optional[str], fingerprint: str) -> Optional[PostingResult]:
        if not key:
            return None
        cached = self.idempotency.get(key)
        if cached is None:
            return None
        if cached.fingerprint != fingerprint:
            raise IdempotencyConflictError("Idempotency key exists with different request body")
        result: PostingResult = cached.response
        return PostingResult(transaction=result.transaction, summary=result.summary, replayed=True)

    def _commit(
        self,
        entries: List[LedgerEntry],
        transaction: Transaction,
        key: Optional[str],
        fingerprint: str,
    ) -> PostingResult:
        self.store.append(entries, transaction)
        result = PostingResult(transaction=transaction, summary=self.summary())

        if key:
            self.idempotency.put(key, fingerprint, result)

        logger.info(
            "Posted transaction",
            extra={
                "step": "append",
                "transaction_id": transaction.id,
                "kind": transaction.kind.value,
                "amount_cents": transaction.amount_cents,
                "entry_count": len(entries),
            },
        )
        return result

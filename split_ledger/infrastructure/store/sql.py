"""SQLAlchemy-backed entry store"""

import threading
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from split_ledger.domain.models import (
    Account,
    Category,
    GroupExpense,
    LedgerEntry,
    Party,
    Settlement,
    Transaction,
    TransactionKind,
)
from split_ledger.infrastructure.database.models import LedgerEntryRecord, LedgerTransactionRecord


def _aware(ts: datetime) -> datetime:
    # SQLite returns naive datetimes even for timezone=True columns
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _entry_to_record(entry: LedgerEntry) -> LedgerEntryRecord:
    return LedgerEntryRecord(
        id=entry.id,
        transaction_id=entry.transaction_id,
        transaction_kind=entry.transaction_kind.value,
        account=entry.account.key,
        party=entry.party.value,
        category=entry.category.value if entry.category else None,
        delta_cents=entry.delta_cents,
        created_at=entry.created_at,
    )


def _record_to_entry(record: LedgerEntryRecord) -> LedgerEntry:
    return LedgerEntry(
        id=record.id,
        transaction_id=record.transaction_id,
        transaction_kind=TransactionKind(record.transaction_kind),
        account=Account.from_key(record.account),
        party=Party(record.party),
        category=Category(record.category) if record.category else None,
        delta_cents=record.delta_cents,
        created_at=_aware(record.created_at),
    )


def _transaction_to_record(transaction: Transaction) -> LedgerTransactionRecord:
    if isinstance(transaction, GroupExpense):
        return LedgerTransactionRecord(
            id=transaction.id,
            kind=TransactionKind.GROUP.value,
            payer=transaction.payer.value,
            category=transaction.category.value,
            amount_cents=transaction.amount_cents,
            per_party_share_cents=transaction.per_party_share_cents,
            remainder_cents=transaction.remainder_cents,
            created_at=transaction.created_at,
        )
    return LedgerTransactionRecord(
        id=transaction.id,
        kind=TransactionKind.SETTLEMENT.value,
        from_party=transaction.from_party.value,
        to_party=transaction.to_party.value,
        amount_cents=transaction.amount_cents,
        created_at=transaction.created_at,
    )


def _record_to_transaction(record: LedgerTransactionRecord) -> Transaction:
    if record.kind == TransactionKind.GROUP.value:
        return GroupExpense(
            id=record.id,
            payer=Party(record.payer),
            amount_cents=record.amount_cents,
            category=Category(record.category),
            per_party_share_cents=record.per_party_share_cents,
            remainder_cents=record.remainder_cents,
            created_at=_aware(record.created_at),
        )
    return Settlement(
        id=record.id,
        from_party=Party(record.from_party),
        to_party=Party(record.to_party),
        amount_cents=record.amount_cents,
        created_at=_aware(record.created_at),
    )


class SqlEntryStore:
    """
    Entry store persisted through SQLAlchemy.

    Each append runs in a single database transaction, so a reader never sees
    part of a posting. The lock serialises writers within this process.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self._lock = threading.Lock()

    def _session(self) -> Session:
        return self.session_factory()

    def append(self, entries: Sequence[LedgerEntry], transaction: Transaction) -> None:
        with self._lock, self._session() as db, db.begin():
            db.add(_transaction_to_record(transaction))
            db.add_all([_entry_to_record(e) for e in entries])

    def append_seed(self, entries: Sequence[LedgerEntry]) -> None:
        with self._lock, self._session() as db, db.begin():
            db.add_all([_entry_to_record(e) for e in entries])

    def all(self) -> List[LedgerEntry]:
        with self._session() as db:
            records = db.scalars(select(LedgerEntryRecord).order_by(LedgerEntryRecord.seq)).all()
            return [_record_to_entry(r) for r in records]

    def transactions(self) -> List[Transaction]:
        with self._session() as db:
            records = db.scalars(
                select(LedgerTransactionRecord).order_by(
                    LedgerTransactionRecord.created_at, LedgerTransactionRecord.seq
                )
            ).all()
            return [_record_to_transaction(r) for r in records]

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self._session() as db:
            record = db.scalars(
                select(LedgerTransactionRecord).filter(LedgerTransactionRecord.id == transaction_id)
            ).first()
            return _record_to_transaction(record) if record else None

    def entries_for(self, transaction_id: str) -> List[LedgerEntry]:
        with self._session() as db:
            records = db.scalars(
                select(LedgerEntryRecord)
                .filter(LedgerEntryRecord.transaction_id == transaction_id)
                .order_by(LedgerEntryRecord.seq)
            ).all()
            return [_record_to_entry(r) for r in records]

    def clear(self) -> None:
        with self._lock, self._session() as db, db.begin():
            db.execute(delete(LedgerEntryRecord))
            db.execute(delete(LedgerTransactionRecord))

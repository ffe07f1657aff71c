"""In-memory entry store"""

import threading
from typing import List, Optional, Sequence

from split_ledger.domain.models import LedgerEntry, Transaction


class InMemoryEntryStore:
    """Process-local store; one lock makes each append atomic for readers"""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: List[LedgerEntry] = []
        self._transactions: List[Transaction] = []

    def append(self, entries: Sequence[LedgerEntry], transaction: Transaction) -> None:
        with self._lock:
            self._entries.extend(entries)
            self._transactions.append(transaction)

    def append_seed(self, entries: Sequence[LedgerEntry]) -> None:
        with self._lock:
            self._entries.extend(entries)

    def all(self) -> List[LedgerEntry]:
        with self._lock:
            return list(self._entries)

    def transactions(self) -> List[Transaction]:
        with self._lock:
            return sorted(self._transactions, key=lambda t: t.created_at)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self._lock:
            return next((t for t in self._transactions if t.id == transaction_id), None)

    def entries_for(self, transaction_id: str) -> List[LedgerEntry]:
        with self._lock:
            return [e for e in self._entries if e.transaction_id == transaction_id]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._transactions.clear()

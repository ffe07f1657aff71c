"""Entry store contract shared by every backend"""

from typing import List, Optional, Protocol, Sequence

from split_ledger.domain.models import LedgerEntry, Transaction


class EntryStore(Protocol):
    """
    Append-only ledger storage.

    - append() records one transaction's entries and its summary atomically
    - all() returns every entry in insertion order, which is also chronological
    - clear() is the only way history is ever removed
    """

    def append(self, entries: Sequence[LedgerEntry], transaction: Transaction) -> None: ...

    def append_seed(self, entries: Sequence[LedgerEntry]) -> None: ...

    def all(self) -> List[LedgerEntry]: ...

    def transactions(self) -> List[Transaction]: ...

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]: ...

    def entries_for(self, transaction_id: str) -> List[LedgerEntry]: ...

    def clear(self) -> None: ...

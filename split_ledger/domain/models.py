"""Domain models - pure Python dataclasses representing ledger entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from split_ledger.domain.exceptions import InvalidCategoryError, InvalidPartyError


class Party(str, Enum):
    """One of the two fixed ledger participants"""

    A = "A"
    B = "B"

    @property
    def other(self) -> "Party":
        return Party.B if self is Party.A else Party.A

    @classmethod
    def parse(cls, value: "str | Party") -> "Party":
        try:
            return cls(value)
        except ValueError:
            raise InvalidPartyError(f"Unknown party: {value!r}") from None


class Category(str, Enum):
    """Closed set of expense categories"""

    FOOD = "food"
    GROCERIES = "groceries"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        try:
            return cls(value)
        except ValueError:
            raise InvalidCategoryError(f"Unknown category: {value!r}") from None


class AccountKind(str, Enum):
    """Account families"""

    CASH = "CASH"  # asset: party's wallet
    EXPENSE = "EXPENSE"  # party's consumption per category
    RECEIVABLE = "RECEIVABLE"  # asset: what party is owed by counterparty
    PAYABLE = "PAYABLE"  # liability: what party owes counterparty


class TransactionKind(str, Enum):
    """Kind of posting that produced an entry"""

    GROUP = "GROUP"
    SETTLEMENT = "SETTLEMENT"
    INITIAL = "INITIAL"


@dataclass(frozen=True)
class Account:
    """
    Ledger bucket identified structurally by kind and the parties it concerns.

    Accounts compare by value, so Account.receivable(A, B) built in two places
    is the same account. `key` is a display/persistence rendering only.
    """

    kind: AccountKind
    party: Party
    counterparty: Optional[Party] = None
    category: Optional[Category] = None

    @classmethod
    def cash(cls, party: Party) -> "Account":
        return cls(AccountKind.CASH, party)

    @classmethod
    def expense(cls, party: Party, category: Category) -> "Account":
        return cls(AccountKind.EXPENSE, party, category=category)

    @classmethod
    def receivable(cls, creditor: Party, debtor: Party) -> "Account":
        return cls(AccountKind.RECEIVABLE, creditor, counterparty=debtor)

    @classmethod
    def payable(cls, debtor: Party, creditor: Party) -> "Account":
        return cls(AccountKind.PAYABLE, debtor, counterparty=creditor)

    @property
    def mirror(self) -> Optional["Account"]:
        """Counterpart account for inter-party debt, None for cash/expense"""
        if self.kind is AccountKind.RECEIVABLE:
            return Account.payable(self.counterparty, self.party)
        if self.kind is AccountKind.PAYABLE:
            return Account.receivable(self.counterparty, self.party)
        return None

    @property
    def key(self) -> str:
        if self.kind is AccountKind.CASH:
            return f"CASH:{self.party.value}"
        if self.kind is AccountKind.EXPENSE:
            return f"EXPENSE:{self.party.value}:{self.category.value}"
        if self.kind is AccountKind.RECEIVABLE:
            return f"DUE_FROM:{self.party.value}->{self.counterparty.value}"
        return f"DUE_TO:{self.party.value}->{self.counterparty.value}"

    @classmethod
    def from_key(cls, key: str) -> "Account":
        """Rebuild an account from its persisted key"""
        prefix, _, rest = key.partition(":")
        if prefix == "CASH":
            return cls.cash(Party.parse(rest))
        if prefix == "EXPENSE":
            party, _, category = rest.partition(":")
            return cls.expense(Party.parse(party), Category.parse(category))
        if prefix in ("DUE_FROM", "DUE_TO"):
            left, _, right = rest.partition("->")
            if prefix == "DUE_FROM":
                return cls.receivable(Party.parse(left), Party.parse(right))
            return cls.payable(Party.parse(left), Party.parse(right))
        raise ValueError(f"Unrecognised account key: {key!r}")


@dataclass(frozen=True)
class LedgerEntry:
    """Single immutable signed movement against one account"""

    id: str
    transaction_id: str
    transaction_kind: TransactionKind
    account: Account
    party: Party
    delta_cents: int
    created_at: datetime
    category: Optional[Category] = None


@dataclass(frozen=True)
class Split:
    """Equal two-way split of an amount in cents"""

    share_cents: int
    remainder_cents: int  # 0 or 1


@dataclass(frozen=True)
class GroupExpense:
    """Summary of a group expense posting"""

    id: str
    payer: Party
    amount_cents: int
    category: Category
    per_party_share_cents: int
    remainder_cents: int
    created_at: datetime
    kind: TransactionKind = TransactionKind.GROUP

    @property
    def parties(self) -> List[Party]:
        return [self.payer, self.payer.other]


@dataclass(frozen=True)
class Settlement:
    """Summary of a settlement posting"""

    id: str
    from_party: Party
    to_party: Party
    amount_cents: int
    created_at: datetime
    kind: TransactionKind = TransactionKind.SETTLEMENT

    @property
    def parties(self) -> List[Party]:
        return [self.from_party, self.to_party]


Transaction = GroupExpense | Settlement


@dataclass(frozen=True)
class NetDue:
    """Who currently owes the other party, and how much"""

    owes: Optional[Party]
    amount_cents: int

    @property
    def to(self) -> Optional[Party]:
        return self.owes.other if self.owes is not None else None


@dataclass
class UserSummary:
    """Wallet and per-category spend for one party"""

    party: Party
    wallet_balance_cents: int
    budget_by_category: Dict[Category, int]


@dataclass
class CompleteSummary:
    """Both parties' summaries plus the net debt between them"""

    users: List[UserSummary]
    net_due: NetDue

    def for_party(self, party: Party) -> UserSummary:
        return next(u for u in self.users if u.party == party)


@dataclass
class NetPosition:
    """Debt seen from one party: who owes, and the amount"""

    owes: Optional[Party]
    amount_cents: int


@dataclass
class CategorySpend:
    """Spend line in the integer-cents summary"""

    category: Category
    name: str
    spent_cents: int


@dataclass
class UserSummaryCents:
    """Integer-cents view of one party's position"""

    party: Party
    balance_cents: int
    spend_by_category: List[CategorySpend] = field(default_factory=list)
    owes_cents: int = 0
    is_owed_cents: int = 0

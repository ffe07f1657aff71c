"""Projections - pure functions folding the full entry history into summaries"""

from typing import Dict, Sequence

from split_ledger.domain.models import (
    Account,
    AccountKind,
    Category,
    CategorySpend,
    CompleteSummary,
    LedgerEntry,
    NetDue,
    NetPosition,
    Party,
    UserSummary,
    UserSummaryCents,
)


def _account_total(account: Account, entries: Sequence[LedgerEntry]) -> int:
    return sum(e.delta_cents for e in entries if e.account == account)


def wallet_balance(party: Party, entries: Sequence[LedgerEntry]) -> int:
    """Sum of all CASH(party) deltas, in cents"""
    return _account_total(Account.cash(party), entries)


def budget_by_category(party: Party, entries: Sequence[LedgerEntry]) -> Dict[Category, int]:
    """Spend per category for one party; every category is always present"""
    budget = {category: 0 for category in Category}
    for entry in entries:
        account = entry.account
        if account.kind is AccountKind.EXPENSE and account.party == party:
            budget[account.category] += entry.delta_cents
    return budget


def net_due(entries: Sequence[LedgerEntry]) -> NetDue:
    """
    Net debt between the parties.

    net = RECEIVABLE(A, B) - RECEIVABLE(B, A)
    - net > 0: B owes A
    - net < 0: A owes B
    - net == 0: nobody owes anything
    """
    a_from_b = _account_total(Account.receivable(Party.A, Party.B), entries)
    b_from_a = _account_total(Account.receivable(Party.B, Party.A), entries)
    net = a_from_b - b_from_a

    if net == 0:
        return NetDue(owes=None, amount_cents=0)
    if net > 0:
        return NetDue(owes=Party.B, amount_cents=net)
    return NetDue(owes=Party.A, amount_cents=-net)


def user_summary(party: Party, entries: Sequence[LedgerEntry]) -> UserSummary:
    return UserSummary(
        party=party,
        wallet_balance_cents=wallet_balance(party, entries),
        budget_by_category=budget_by_category(party, entries),
    )


def complete_summary(entries: Sequence[LedgerEntry]) -> CompleteSummary:
    """Summaries for both parties plus net due"""
    return CompleteSummary(
        users=[user_summary(Party.A, entries), user_summary(Party.B, entries)],
        net_due=net_due(entries),
    )


def net_position(party: Party, entries: Sequence[LedgerEntry]) -> NetPosition:
    """
    Net due as reported in one party's compact summary.

    When the party is the debtor, `owes` names the creditor they owe;
    otherwise `owes` names the debtor (or None) as in net_due.
    """
    due = net_due(entries)
    if due.owes == party:
        return NetPosition(owes=party.other, amount_cents=due.amount_cents)
    return NetPosition(owes=due.owes, amount_cents=due.amount_cents)


def user_summary_cents(party: Party, entries: Sequence[LedgerEntry]) -> UserSummaryCents:
    """Integer-cents view with owes / is-owed split out for one party"""
    due = net_due(entries)
    budget = budget_by_category(party, entries)

    owes = due.amount_cents if due.owes == party else 0
    is_owed = due.amount_cents if due.owes == party.other else 0

    return UserSummaryCents(
        party=party,
        balance_cents=wallet_balance(party, entries),
        spend_by_category=[
            CategorySpend(category=c, name=c.display_name, spent_cents=budget[c]) for c in Category
        ],
        owes_cents=owes,
        is_owed_cents=is_owed,
    )

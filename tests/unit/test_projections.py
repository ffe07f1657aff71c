"""Unit tests for projections over the entry history"""

from split_ledger.domain.ledger import post_group_expense, post_settlement
from split_ledger.domain.models import Category, NetDue, Party
from split_ledger.domain.projections import (
    budget_by_category,
    complete_summary,
    net_due,
    net_position,
    user_summary_cents,
    wallet_balance,
)


def test_empty_history():
    summary = complete_summary([])

    assert [u.wallet_balance_cents for u in summary.users] == [0, 0]
    assert summary.net_due == NetDue(owes=None, amount_cents=0)
    for user in summary.users:
        assert set(user.budget_by_category) == set(Category)
        assert all(v == 0 for v in user.budget_by_category.values())


def test_wallet_balance_sums_cash_only(seed_entries):
    entries = seed_entries + post_group_expense(Party.A, "120.00", Category.FOOD)

    assert wallet_balance(Party.A, entries) == 38_000
    assert wallet_balance(Party.B, entries) == 50_000


def test_budget_by_category_always_has_all_categories(seed_entries):
    entries = seed_entries + post_group_expense(Party.B, "80.00", Category.GROCERIES)
    budget = budget_by_category(Party.A, entries)

    assert budget == {
        Category.FOOD: 0,
        Category.GROCERIES: 4000,
        Category.TRANSPORT: 0,
        Category.ENTERTAINMENT: 0,
        Category.OTHER: 0,
    }


def test_net_due_direction():
    a_paid = post_group_expense(Party.A, "100.00", Category.FOOD)
    assert net_due(a_paid) == NetDue(owes=Party.B, amount_cents=5000)

    b_paid_more = a_paid + post_group_expense(Party.B, "300.00", Category.OTHER)
    assert net_due(b_paid_more) == NetDue(owes=Party.A, amount_cents=10000)


def test_net_due_zero_after_offsetting_expenses():
    entries = post_group_expense(Party.A, "60.00", Category.FOOD) + post_group_expense(
        Party.B, "60.00", Category.TRANSPORT
    )
    assert net_due(entries) == NetDue(owes=None, amount_cents=0)


def test_scenario_seed_expense_settle(seed_entries):
    """500/500, A pays 120 food, B settles 60"""
    entries = seed_entries + post_group_expense(Party.A, "120.00", Category.FOOD)

    assert wallet_balance(Party.A, entries) == 38_000
    assert wallet_balance(Party.B, entries) == 50_000
    assert budget_by_category(Party.A, entries)[Category.FOOD] == 6000
    assert budget_by_category(Party.B, entries)[Category.FOOD] == 6000
    assert net_due(entries) == NetDue(owes=Party.B, amount_cents=6000)

    entries += post_settlement(Party.B, Party.A, "60.00")

    assert wallet_balance(Party.A, entries) == 44_000
    assert wallet_balance(Party.B, entries) == 44_000
    assert net_due(entries) == NetDue(owes=None, amount_cents=0)


def test_one_cent_expense_leaves_nothing_owed():
    entries = post_group_expense(Party.A, "0.01", Category.FOOD)

    assert budget_by_category(Party.A, entries)[Category.FOOD] == 1
    assert budget_by_category(Party.B, entries)[Category.FOOD] == 0
    assert net_due(entries) == NetDue(owes=None, amount_cents=0)


def test_two_cent_expense_splits_evenly():
    entries = post_group_expense(Party.A, "0.02", Category.FOOD)

    assert budget_by_category(Party.A, entries)[Category.FOOD] == 1
    assert budget_by_category(Party.B, entries)[Category.FOOD] == 1
    assert net_due(entries) == NetDue(owes=Party.B, amount_cents=1)


def test_settlements_leave_budgets_unchanged(seed_entries):
    entries = seed_entries + post_group_expense(Party.A, "200.00", Category.ENTERTAINMENT)
    before = complete_summary(entries)

    entries += post_settlement(Party.B, Party.A, "30.00")
    entries += post_settlement(Party.B, Party.A, "70.00")
    after = complete_summary(entries)

    for party in Party:
        assert after.for_party(party).budget_by_category == before.for_party(party).budget_by_category
    assert after.net_due == NetDue(owes=None, amount_cents=0)


def test_complete_summary_is_pure(seed_entries):
    entries = seed_entries + post_group_expense(Party.A, "33.33", Category.OTHER)
    snapshot = list(entries)

    first = complete_summary(entries)
    second = complete_summary(entries)

    assert first == second
    assert entries == snapshot


def test_net_position_from_each_side():
    entries = post_group_expense(Party.A, "50.00", Category.FOOD)

    # B is the debtor: their view names the creditor
    b_view = net_position(Party.B, entries)
    assert (b_view.owes, b_view.amount_cents) == (Party.A, 2500)

    a_view = net_position(Party.A, entries)
    assert (a_view.owes, a_view.amount_cents) == (Party.B, 2500)


def test_rounding_rule_twenty_and_twenty_oh_one(seed_entries):
    """A pays 20.00 food then 20.01 groceries"""
    entries = (
        seed_entries
        + post_group_expense(Party.A, "20.00", Category.FOOD)
        + post_group_expense(Party.A, "20.01", Category.GROCERIES)
    )

    a = user_summary_cents(Party.A, entries)
    b = user_summary_cents(Party.B, entries)

    assert a.balance_cents == 45_999
    assert {s.name: s.spent_cents for s in a.spend_by_category}["Food"] == 1000
    assert {s.name: s.spent_cents for s in a.spend_by_category}["Groceries"] == 1001
    assert (a.owes_cents, a.is_owed_cents) == (0, 2000)

    assert b.balance_cents == 50_000
    assert {s.name: s.spent_cents for s in b.spend_by_category}["Groceries"] == 1000
    assert (b.owes_cents, b.is_owed_cents) == (2000, 0)

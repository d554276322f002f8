from decimal import Decimal

import pytest

from akibaflow.core.aggregation import (
    account_name,
    budget_progress,
    budget_split,
    category_name,
    filter_transactions,
    income_total,
    spending_by_category,
    total_balance,
)
from akibaflow.core.models import Account, Category, Transaction
from akibaflow.errors import ConfigError

from conftest import FakeApi


@pytest.fixture
def data():
    api = FakeApi()
    return (
        [Account.model_validate(a) for a in api.accounts],
        [Category.model_validate(c) for c in api.categories],
        [Transaction.model_validate(t) for t in api.transactions],
    )


def test_total_balance_sums_current_balances(data):
    accounts, _, _ = data
    assert total_balance(accounts) == Decimal("2000.00")
    assert total_balance([]) == Decimal("0")


def test_total_balance_treats_missing_balance_as_zero(data):
    accounts, _, _ = data
    blank = accounts[0].model_copy(update={"current_balance": None})
    assert total_balance([blank, accounts[1]]) == Decimal("749.50")


def test_spending_by_category_counts_expenses_only(data):
    _, categories, txs = data
    spending = spending_by_category(txs, categories)
    assert spending == {
        1: Decimal("200.50"),
        2: Decimal("45.00"),
        3: Decimal("0"),
    }


def test_spending_by_category_without_category_list(data):
    _, _, txs = data
    assert spending_by_category(txs) == {1: Decimal("200.50"), 2: Decimal("45.00")}


def test_income_total(data):
    _, _, txs = data
    assert income_total(txs) == Decimal("3000.00")


def test_filter_transactions(data):
    _, _, txs = data
    assert [t.id for t in filter_transactions(txs)] == [1, 2, 3, 4]
    assert [t.id for t in filter_transactions(txs, search="GROCERY")] == [1]
    assert [t.id for t in filter_transactions(txs, transaction_type="income")] == [2]
    assert [t.id for t in filter_transactions(txs, transaction_type="EXPENSE", category_id=1)] == [1, 3]
    assert filter_transactions(txs, search="rent") == []


def test_name_lookups_fall_back_to_ids(data):
    accounts, categories, _ = data
    assert account_name(accounts, 2) == "Savings"
    assert account_name(accounts, 9) == "Account 9"
    assert category_name(categories, 1) == "Food"
    assert category_name(categories, 9) == "Category 9"


def test_budget_split_fifty_thirty_twenty():
    split = budget_split(Decimal("3000.00"), {"needs": 50, "wants": 30, "savings": 20})
    assert split == {
        "needs": Decimal("1500.00"),
        "wants": Decimal("900.00"),
        "savings": Decimal("600.00"),
    }


def test_budget_split_rejects_rule_not_adding_up():
    with pytest.raises(ConfigError):
        budget_split(Decimal("100"), {"needs": 50, "wants": 30})


def test_budget_progress_matches_name_or_system_name(data):
    _, categories, txs = data
    spending = spending_by_category(txs, categories)
    rows = budget_progress(categories, spending, {"food": 400, "Transport": 45, "Travel": 100})
    by_name = {row["category"]: row for row in rows}

    assert by_name["food"]["spent"] == Decimal("200.50")
    assert by_name["food"]["remaining"] == Decimal("199.50")
    assert by_name["Transport"]["percent"] == Decimal("100.0")
    assert by_name["Travel"]["spent"] == Decimal("0")
    assert by_name["Travel"]["remaining"] == Decimal("100")

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from akibaflow.errors import FormError
from akibaflow.forms import (
    account_form,
    account_update_form,
    category_form,
    login_form,
    profile_update_form,
    register_form,
    transaction_form,
    transaction_update_form,
)


@pytest.mark.parametrize("name, balance", [("", "100"), ("   ", "100"), ("Main", ""), ("Main", None)])
def test_account_form_requires_all_fields(name, balance):
    with pytest.raises(FormError, match="Please fill in all fields"):
        account_form(name, balance)


@pytest.mark.parametrize("balance", ["abc", "12,5", "NaN", "inf"])
def test_account_form_rejects_non_numeric_balance(balance):
    with pytest.raises(FormError, match="must be a number"):
        account_form("Main", balance)


def test_account_form_builds_request():
    form = account_form("  Main Checking ", "1500.75", "kes", "savings")
    assert form.name == "Main Checking"
    assert form.initial_balance == Decimal("1500.75")
    assert form.currency == "KES"
    assert form.type == "savings"


def test_account_form_rejects_unknown_type():
    with pytest.raises(FormError):
        account_form("Main", "1", account_type="brokerage")


def test_account_update_form():
    assert account_update_form(is_active=False).model_dump(exclude_unset=True) == {"is_active": False}
    with pytest.raises(FormError):
        account_update_form()
    with pytest.raises(FormError):
        account_update_form(name=" ")


def test_transaction_form_builds_request():
    form = transaction_form("250.00", "expense", "1", "2", " Grocery shopping ", "2025-05-10")
    assert form.amount == Decimal("250.00")
    assert form.transaction_type == "EXPENSE"
    assert form.account_id == 1
    assert form.category_id == 2
    assert form.description == "Grocery shopping"
    assert form.transaction_date == datetime(2025, 5, 10, tzinfo=timezone.utc)


def test_transaction_form_defaults_to_today():
    form = transaction_form("10", "INCOME", 1, 1)
    assert form.transaction_date.date() == date.today()


@pytest.mark.parametrize(
    "args, message",
    [
        (("", "EXPENSE", 1, 1), "required"),
        (("10", "EXPENSE", "", 1), "required"),
        (("10", "TRANSFER", 1, 1), "INCOME or EXPENSE"),
        (("ten", "EXPENSE", 1, 1), "must be a number"),
        (("10", "EXPENSE", "one", 1), "numeric id"),
    ],
)
def test_transaction_form_rejects_bad_input(args, message):
    with pytest.raises(FormError, match=message):
        transaction_form(*args)


def test_transaction_form_rejects_bad_date():
    with pytest.raises(FormError, match="YYYY-MM-DD"):
        transaction_form("10", "EXPENSE", 1, 1, "", "10/05/2025")


def test_transaction_update_form():
    changes = transaction_update_form(category_id="3", transaction_date="2025-06-01")
    assert changes.model_dump(exclude_unset=True) == {
        "category_id": 3,
        "transaction_date": datetime(2025, 6, 1, tzinfo=timezone.utc),
    }
    with pytest.raises(FormError):
        transaction_update_form()


def test_category_form_system_name_is_optional():
    assert category_form("Gym").system_name is None
    assert category_form("Gym", " Health ").system_name == "health"
    with pytest.raises(FormError):
        category_form("")


def test_login_and_register_forms_require_fields():
    assert login_form(" ada@example.com ", "secret").username == "ada@example.com"
    with pytest.raises(FormError):
        login_form("ada@example.com", "")
    with pytest.raises(FormError):
        register_form("Ada", "Lovelace", "ada@example.com", "secret", "")


def test_profile_update_form():
    changes = profile_update_form(first_name=" Grace ", phone_number="0711")
    assert changes.model_dump(exclude_unset=True) == {"first_name": "Grace", "phone_number": "0711"}

    with pytest.raises(FormError, match="Name cannot be empty"):
        profile_update_form(last_name="  ")
    with pytest.raises(FormError, match="Nothing to update"):
        profile_update_form()

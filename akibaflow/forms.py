# akibaflow/forms.py
from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from akibaflow.core.models import (
    AccountCreate,
    AccountUpdate,
    CategoryCreate,
    LoginRequest,
    TransactionCreate,
    TransactionUpdate,
    UserCreate,
    UserUpdate,
)
from akibaflow.errors import FormError

ACCOUNT_TYPES = ("checking", "savings", "credit")
TRANSACTION_TYPES = ("INCOME", "EXPENSE")
REQUIRED = "Please fill in all fields"


def _blank(value) -> bool:
    return value is None or str(value).strip() == ""


def parse_amount(value, field_name: str = "Amount") -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise FormError(f"{field_name} must be a number") from None
    if not amount.is_finite():
        raise FormError(f"{field_name} must be a number")
    return amount


def parse_date(value: str) -> datetime:
    """YYYY-MM-DD to a UTC midnight timestamp."""
    try:
        day = date.fromisoformat(str(value).strip())
    except ValueError:
        raise FormError(f"Invalid date '{value}', expected YYYY-MM-DD") from None
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def parse_id(value, field_name: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        raise FormError(f"{field_name} must be a numeric id") from None


def login_form(username: str, password: str) -> LoginRequest:
    if _blank(username) or _blank(password):
        raise FormError(REQUIRED)
    return LoginRequest(username=username.strip(), password=password)


def register_form(first_name, last_name, email, password, phone_number) -> UserCreate:
    if any(_blank(v) for v in (first_name, last_name, email, password, phone_number)):
        raise FormError(REQUIRED)
    return UserCreate(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email.strip(),
        password=password,
        phone_number=phone_number.strip(),
    )


def account_form(name, initial_balance, currency: str = "KES", account_type: str = "checking") -> AccountCreate:
    if _blank(name) or _blank(initial_balance):
        raise FormError(REQUIRED)
    if account_type not in ACCOUNT_TYPES:
        raise FormError(f"Account type must be one of {', '.join(ACCOUNT_TYPES)}")
    return AccountCreate(
        name=name.strip(),
        initial_balance=parse_amount(initial_balance, "Initial balance"),
        currency=(currency or "KES").strip().upper(),
        type=account_type,
    )


def account_update_form(name=None, currency=None, account_type=None, is_active=None) -> AccountUpdate:
    changes = {}
    if name is not None:
        if _blank(name):
            raise FormError("Account name cannot be empty")
        changes["name"] = name.strip()
    if currency is not None:
        changes["currency"] = currency.strip().upper()
    if account_type is not None:
        if account_type not in ACCOUNT_TYPES:
            raise FormError(f"Account type must be one of {', '.join(ACCOUNT_TYPES)}")
        changes["type"] = account_type
    if is_active is not None:
        changes["is_active"] = is_active
    if not changes:
        raise FormError("Nothing to update")
    return AccountUpdate(**changes)


def category_form(name, system_name: Optional[str] = None) -> CategoryCreate:
    if _blank(name):
        raise FormError(REQUIRED)
    fields = {"name": name.strip()}
    if not _blank(system_name):
        fields["system_name"] = system_name.strip().lower()
    return CategoryCreate(**fields)


def transaction_form(
    amount,
    transaction_type,
    account_id,
    category_id,
    description: str = "",
    transaction_date: Optional[str] = None,
) -> TransactionCreate:
    if _blank(amount) or _blank(account_id) or _blank(category_id):
        raise FormError("Please fill in all required fields")
    kind = str(transaction_type or "EXPENSE").upper()
    if kind not in TRANSACTION_TYPES:
        raise FormError("Type must be INCOME or EXPENSE")
    when = parse_date(transaction_date) if not _blank(transaction_date) else parse_date(date.today().isoformat())
    return TransactionCreate(
        amount=parse_amount(amount),
        transaction_type=kind,
        account_id=parse_id(account_id, "Account"),
        category_id=parse_id(category_id, "Category"),
        description=(description or "").strip(),
        transaction_date=when,
    )


def transaction_update_form(category_id=None, description=None, transaction_date=None) -> TransactionUpdate:
    changes = {}
    if category_id is not None:
        changes["category_id"] = parse_id(category_id, "Category")
    if description is not None:
        changes["description"] = description.strip()
    if transaction_date is not None:
        changes["transaction_date"] = parse_date(transaction_date)
    if not changes:
        raise FormError("Nothing to update")
    return TransactionUpdate(**changes)


def profile_update_form(first_name=None, last_name=None, phone_number=None) -> UserUpdate:
    changes = {}
    for field, value in (("first_name", first_name), ("last_name", last_name)):
        if value is not None:
            if _blank(value):
                raise FormError("Name cannot be empty")
            changes[field] = value.strip()
    if phone_number is not None:
        changes["phone_number"] = phone_number.strip()
    if not changes:
        raise FormError("Nothing to update")
    return UserUpdate(**changes)

# akibaflow/core/aggregation.py
from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from akibaflow.core.models import Account, Category, Transaction
from akibaflow.errors import ConfigError

ZERO = Decimal("0")


def total_balance(accounts: Iterable[Account]) -> Decimal:
    """Sum of current balances; an account without one counts as zero."""
    return sum((acc.current_balance or ZERO for acc in accounts), ZERO)


def spending_by_category(
    transactions: Iterable[Transaction],
    categories: Iterable[Category] = (),
) -> Dict[int, Decimal]:
    """
    EXPENSE totals keyed by category id. Every category passed in is reported,
    with zero when nothing was spent in it.
    """
    spending: Dict[int, Decimal] = {cat.id: ZERO for cat in categories}
    for tx in transactions:
        if tx.transaction_type == "EXPENSE":
            spending[tx.category_id] = spending.get(tx.category_id, ZERO) + tx.amount
    return spending


def income_total(transactions: Iterable[Transaction]) -> Decimal:
    return sum(
        (tx.amount for tx in transactions if tx.transaction_type == "INCOME"),
        ZERO,
    )


def filter_transactions(
    transactions: Iterable[Transaction],
    search: str = "",
    transaction_type: str = "ALL",
    category_id: Optional[int] = None,
) -> List[Transaction]:
    """
    Return the transactions whose description contains ``search``
    (case-insensitive), whose type matches (``ALL`` keeps both) and whose
    category matches when ``category_id`` is given.
    """
    needle = (search or "").lower()
    kind = (transaction_type or "ALL").upper()
    return [
        tx for tx in transactions
        if needle in tx.description.lower()
        and (kind == "ALL" or tx.transaction_type == kind)
        and (category_id is None or tx.category_id == category_id)
    ]


def account_name(accounts: Iterable[Account], account_id: int) -> str:
    match = next((acc for acc in accounts if acc.id == account_id), None)
    return match.name if match else f"Account {account_id}"


def category_name(categories: Iterable[Category], category_id: int) -> str:
    match = next((cat for cat in categories if cat.id == category_id), None)
    return match.name if match else f"Category {category_id}"


def budget_split(amount: Decimal, rule: Mapping[str, object]) -> Dict[str, Decimal]:
    """Split ``amount`` by percentage buckets, e.g. the 50/30/20 rule."""
    percents = {name: Decimal(str(pct)) for name, pct in rule.items()}
    if sum(percents.values(), ZERO) != Decimal("100"):
        raise ConfigError(f"Budget rule percentages must add up to 100: {dict(rule)}")
    return {
        name: (amount * pct / Decimal("100")).quantize(Decimal("0.01"))
        for name, pct in percents.items()
    }


def budget_progress(
    categories: Iterable[Category],
    spending: Mapping[int, Decimal],
    budgets: Mapping[str, object],
) -> List[Dict[str, object]]:
    """
    Spent/limit/remaining per configured budget. Budgets are keyed by category
    name or system name (case-insensitive); a budget with no matching category
    has spent nothing.
    """
    by_key: Dict[str, List[int]] = {}
    for cat in categories:
        by_key.setdefault(cat.name.lower(), []).append(cat.id)
        if cat.system_name:
            by_key.setdefault(cat.system_name.lower(), []).append(cat.id)

    rows = []
    for name, limit in budgets.items():
        budget = Decimal(str(limit))
        ids = set(by_key.get(name.lower(), []))
        spent = sum((spending.get(cid, ZERO) for cid in ids), ZERO)
        percent = (spent / budget * 100) if budget else ZERO
        rows.append(
            {
                "category": name,
                "spent": spent,
                "budget": budget,
                "remaining": budget - spent,
                "percent": percent.quantize(Decimal("0.1")),
            }
        )
    return rows

from __future__ import annotations

from typing import List

from akibaflow.api.client import ApiClient
from akibaflow.api.cache import QueryState
from akibaflow.core.models import Transaction, TransactionCreate, TransactionUpdate, to_payload

TRANSACTIONS_PATH = "/transactions"
DEFAULT_LIMIT = 100


def _page(skip: int, limit: int) -> dict:
    return {"skip": skip, "limit": limit}


class TransactionsApi:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self, skip: int = 0, limit: int = DEFAULT_LIMIT, refetch: bool = False) -> List[Transaction]:
        """One page of transactions; each (skip, limit) pair is cached separately."""
        return self.client.query(
            TRANSACTIONS_PATH, List[Transaction], params=_page(skip, limit), refetch=refetch
        )

    def state(self, skip: int = 0, limit: int = DEFAULT_LIMIT) -> QueryState:
        return self.client.query_state(TRANSACTIONS_PATH, _page(skip, limit))

    def get(self, transaction_id: int, refetch: bool = False) -> Transaction:
        return self.client.query(f"{TRANSACTIONS_PATH}/{transaction_id}", Transaction, refetch=refetch)

    def create(self, transaction: TransactionCreate) -> Transaction:
        return self.client.mutate(
            "POST", TRANSACTIONS_PATH, Transaction, json=to_payload(transaction)
        )

    def update(self, transaction_id: int, changes: TransactionUpdate) -> Transaction:
        return self.client.mutate(
            "PATCH",
            f"{TRANSACTIONS_PATH}/{transaction_id}",
            Transaction,
            json=to_payload(changes, partial=True),
        )

    def delete(self, transaction_id: int) -> None:
        self.client.mutate("DELETE", f"{TRANSACTIONS_PATH}/{transaction_id}")

from __future__ import annotations

from typing import List

from akibaflow.api.client import ApiClient
from akibaflow.api.cache import QueryState
from akibaflow.core.models import Account, AccountCreate, AccountUpdate, to_payload

ACCOUNTS_PATH = "/accounts/"


class AccountsApi:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self, refetch: bool = False) -> List[Account]:
        return self.client.query(ACCOUNTS_PATH, List[Account], refetch=refetch)

    def state(self) -> QueryState:
        return self.client.query_state(ACCOUNTS_PATH)

    def get(self, account_id: int, refetch: bool = False) -> Account:
        return self.client.query(f"/accounts/{account_id}", Account, refetch=refetch)

    def create(self, account: AccountCreate) -> Account:
        return self.client.mutate("POST", ACCOUNTS_PATH, Account, json=to_payload(account))

    def update(self, account_id: int, changes: AccountUpdate) -> Account:
        return self.client.mutate(
            "PATCH", f"/accounts/{account_id}", Account, json=to_payload(changes, partial=True)
        )

    def delete(self, account_id: int) -> None:
        self.client.mutate("DELETE", f"/accounts/{account_id}")

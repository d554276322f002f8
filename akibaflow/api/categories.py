from __future__ import annotations

from typing import List

from akibaflow.api.client import ApiClient
from akibaflow.api.cache import QueryState
from akibaflow.core.models import Category, CategoryCreate, to_payload

CATEGORIES_PATH = "/categories"


class CategoriesApi:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list(self, refetch: bool = False) -> List[Category]:
        return self.client.query(CATEGORIES_PATH, List[Category], refetch=refetch)

    def state(self) -> QueryState:
        return self.client.query_state(CATEGORIES_PATH)

    def get(self, category_id: int, refetch: bool = False) -> Category:
        return self.client.query(f"{CATEGORIES_PATH}/{category_id}", Category, refetch=refetch)

    def create(self, category: CategoryCreate) -> Category:
        return self.client.mutate("POST", CATEGORIES_PATH, Category, json=to_payload(category))

from akibaflow.api.accounts import AccountsApi
from akibaflow.api.auth import AuthApi
from akibaflow.api.cache import QueryCache, QueryState
from akibaflow.api.categories import CategoriesApi
from akibaflow.api.client import ApiClient
from akibaflow.api.transactions import TransactionsApi
from akibaflow.api.users import UsersApi

__all__ = [
    "AccountsApi",
    "ApiClient",
    "AuthApi",
    "CategoriesApi",
    "QueryCache",
    "QueryState",
    "TransactionsApi",
    "UsersApi",
]

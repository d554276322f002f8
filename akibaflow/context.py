from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import httpx

from akibaflow.api import AccountsApi, ApiClient, AuthApi, CategoriesApi, TransactionsApi, UsersApi
from akibaflow.errors import NotAuthenticatedError
from akibaflow.forms import login_form
from akibaflow.session import AuthSession, SessionStore

logger = logging.getLogger(__name__)


class AppContext:
    """
    Everything a command needs to talk to the API: config, the persisted
    session, the HTTP client with its query cache, and one accessor per
    resource. ``open`` rehydrates the session, ``close`` releases the client.
    """

    def __init__(
        self,
        config: Dict[str, object],
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config
        self.session = SessionStore(Path(str(config["session_file"])))
        self.client = ApiClient(str(config["api_base_url"]), self.session, transport=transport)
        self.auth = AuthApi(self.client)
        self.accounts = AccountsApi(self.client)
        self.categories = CategoriesApi(self.client)
        self.transactions = TransactionsApi(self.client)
        self.users = UsersApi(self.client)

    @classmethod
    def open(cls, config: Dict[str, object], transport: Optional[httpx.BaseTransport] = None) -> "AppContext":
        context = cls(config, transport=transport)
        if context.session.load():
            logger.debug("Restored session for user %s", context.session.user.id)
        return context

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def require_session(self) -> AuthSession:
        if not self.session.is_authenticated:
            raise NotAuthenticatedError()
        return self.session.session


def sign_in(context: AppContext, username: str, password: str) -> AuthSession:
    """Exchange credentials for a token, look up its user and store both."""
    token = context.auth.login(login_form(username, password))
    user = context.auth.whoami(token=token.access_token)
    context.client.cache.clear()
    return context.session.set(user, token.access_token)


def sign_out(context: AppContext) -> None:
    context.session.clear()
    context.client.cache.clear()

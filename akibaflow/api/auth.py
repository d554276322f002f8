from __future__ import annotations

from typing import Optional

from akibaflow.api.client import ApiClient
from akibaflow.core.models import LoginRequest, Token, User, UserCreate, to_payload

WHOAMI_PATH = "/auth/whoami"


class AuthApi:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def login(self, credentials: LoginRequest) -> Token:
        # OAuth2 password flow: form encoded, no bearer token
        return self.client.mutate(
            "POST", "/auth/login", Token, data=credentials.form_data(), auth=False
        )

    def register(self, user: UserCreate) -> User:
        return self.client.mutate("POST", "/auth/register", User, json=to_payload(user), auth=False)

    def whoami(self, token: Optional[str] = None, refetch: bool = False) -> User:
        """
        The user behind ``token``, or behind the stored session when no token
        is given. Only the session-backed lookup is cached.
        """
        if token is not None:
            return self.client.mutate("GET", WHOAMI_PATH, User, token=token)
        return self.client.query(WHOAMI_PATH, User, refetch=refetch)

from __future__ import annotations

from akibaflow.api.client import ApiClient
from akibaflow.core.models import User, UserUpdate, to_payload

USERS_PATH = "/user"


class UsersApi:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def update(self, user_id: int, changes: UserUpdate) -> User:
        """Replace the editable profile fields; only the ones set on ``changes`` are sent."""
        return self.client.mutate(
            "PUT", f"{USERS_PATH}/{user_id}", User, json=to_payload(changes, partial=True)
        )

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from akibaflow.core.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    user: User
    token: str

    def to_dict(self) -> dict:
        return {"user": self.user.model_dump(mode="json"), "token": self.token}


class SessionStore:
    """Holds the current session and mirrors it to a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._session: Optional[AuthSession] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None

    @property
    def user(self) -> Optional[User]:
        return self._session.user if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def load(self) -> Optional[AuthSession]:
        self._session = None
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
            self._session = AuthSession(user=User.model_validate(data["user"]), token=data["token"])
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValidationError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            self._session = None
        return self._session

    def set(self, user: User, token: str) -> AuthSession:
        self._session = AuthSession(user=user, token=token)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # the file holds a bearer token: owner read/write only
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            json.dump(self._session.to_dict(), fp, indent=2)
        self.path.chmod(0o600)
        logger.info("Session stored for %s", user.email)
        return self._session

    def clear(self) -> None:
        self._session = None
        self.path.unlink(missing_ok=True)
        logger.info("Session cleared")

"""Authentication Provider, handles the login of users."""

import logging
import secrets
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from msgboard.core.auth_models import LoginRequest, User

logger = logging.getLogger(__name__)


class IAuthProvider(ABC):
    """
    Abstract interface for the authentication provider.
    """

    @abstractmethod
    async def authenticate(self, credentials: LoginRequest) -> Optional[User]:
        """
        Verifies credentials and returns a User if valid,
        otherwise None
        """
        pass


class DummyAuthProvider(IAuthProvider):
    """
    Username-based provider. Any non-blank username is accepted;
    if a board password is configured, the password must match it.
    """

    def __init__(self, board_password: Optional[str] = None) -> None:
        self.board_password = board_password

    async def authenticate(self, credentials: LoginRequest) -> Optional[User]:
        username = credentials.username.strip()
        if not username:
            logger.warning("Login attempt with empty username")
            return None

        if self.board_password is not None and not secrets.compare_digest(
            credentials.password.encode(), self.board_password.encode()
        ):
            logger.warning("Login attempt with wrong password for %s", username)
            return None

        user_uuid = uuid.uuid5(uuid.NAMESPACE_DNS, username)

        return User(id=user_uuid, username=username, is_authenticated=True)

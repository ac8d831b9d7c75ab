"""
Bearer token sessions issued at login.
Tokens live in memory only and expire after a configurable TTL.
"""

import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from msgboard.core.auth_models import Session, User
from msgboard.core.message import utc_now

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps opaque bearer tokens to authenticated users."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], datetime] = utc_now) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self, user: User) -> Session:
        """Issues a new token for the user, dropping any sessions that have expired."""
        now = self._clock()
        session = Session(token=secrets.token_urlsafe(32), user=user, created_at=now)
        with self._lock:
            expired = [token for token, s in self._sessions.items() if now - s.created_at >= self._ttl]
            for token in expired:
                del self._sessions[token]
            self._sessions[session.token] = session

        if expired:
            logger.info("Dropped %d expired sessions", len(expired))
        logger.info("Session opened for %s", user.username)
        return session

    def resolve(self, token: str) -> Optional[User]:
        """Returns the user owning the token, or None if unknown or expired."""
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None

            if self._clock() - session.created_at >= self._ttl:
                del self._sessions[token]
                logger.info("Session for %s expired", session.user.username)
                return None

            return session.user

    def revoke(self, token: str) -> bool:
        """Drops the token. Returns False if it was not known."""
        with self._lock:
            session = self._sessions.pop(token, None)

        if session is None:
            return False

        logger.info("Session closed for %s", session.user.username)
        return True

"""
FastAPI dependencies for request auth, client address and service lookup.
Services live on ``app.state`` and are created by ``create_app``.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.requests import HTTPConnection
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from msgboard.core.auth_models import User
from msgboard.services.auth import IAuthProvider
from msgboard.services.sessions import SessionRegistry
from msgboard.services.store import MessageStore
from msgboard.services.websocket import ConnectionManager

bearer_scheme = HTTPBearer(auto_error=False)


def get_message_store(conn: HTTPConnection) -> MessageStore:
    return conn.app.state.message_store


def get_session_registry(conn: HTTPConnection) -> SessionRegistry:
    return conn.app.state.sessions


def get_auth_provider(conn: HTTPConnection) -> IAuthProvider:
    return conn.app.state.auth_provider


def get_connection_manager(conn: HTTPConnection) -> ConnectionManager:
    return conn.app.state.connections


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Extracts the bearer token, rejecting requests without one."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Please login first.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> User:
    """
    Dependency that resolves the bearer token to a logged in user.
    """
    user = sessions.resolve(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_client_ip(request: Request) -> str:
    """
    Returns the caller's address: first X-Forwarded-For entry,
    then X-Real-IP, then the peer of the connection.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host

    return "unknown"
"""
API Routes definition.
Handles Authentication, posting and reading messages, and the live WebSocket feed.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel

from msgboard.api.dependencies import (
    get_auth_provider,
    get_bearer_token,
    get_client_ip,
    get_connection_manager,
    get_current_user,
    get_message_store,
    get_session_registry,
)
from msgboard.config.settings import settings
from msgboard.core.auth_models import LoginRequest, Session, User
from msgboard.core.message import Message
from msgboard.services.auth import IAuthProvider
from msgboard.services.sessions import SessionRegistry
from msgboard.services.store import MessageStore
from msgboard.services.websocket import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()


class PostMessageRequest(BaseModel):
    """Payload for posting a message."""

    message: Optional[str] = None


# === PUBLIC ROUTES ===


@router.post("/login", response_model=Session)
async def login(
    credentials: LoginRequest,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> Session:
    """
    Login endpoint.
    Authenticates the user and issues a bearer token.
    """
    user = await auth_provider.authenticate(credentials)

    if not user or not user.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials.")

    return sessions.create(user)


@router.get("/health")
async def health_check(store: MessageStore = Depends(get_message_store)) -> Dict[str, Any]:
    """Returns the board status"""
    return {"status": "online", "messages": len(store)}


# === Protected routes ===


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> None:
    """Revokes the token used for this request"""
    sessions.revoke(token)


@router.get("/me", response_model=User)
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    """Returns the current user profile"""
    return current_user


@router.get("/messages", response_model=List[Message])
async def get_messages(
    current_user: User = Depends(get_current_user),
    store: MessageStore = Depends(get_message_store),
) -> List[Message]:
    """
    Retrieves the most recent messages, newest first.
    """
    return store.recent(settings.recent_limit)


@router.post("/messages", response_model=Message, status_code=status.HTTP_201_CREATED)
async def post_message(
    payload: PostMessageRequest,
    current_user: User = Depends(get_current_user),
    client_ip: str = Depends(get_client_ip),
    store: MessageStore = Depends(get_message_store),
    connections: ConnectionManager = Depends(get_connection_manager),
) -> Message:
    """
    Posts a message tagged with the caller's address.
    Blank messages are rejected before anything is stored.
    """
    if payload.message is None or not payload.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message must not be empty.")

    message = store.insert(payload.message, client_ip)
    logger.info("Message %s posted by %s from %s", message.id, current_user.username, client_ip)

    await connections.broadcast(message)

    return message


# === WebSocket Route ===


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(default=""),
    sessions: SessionRegistry = Depends(get_session_registry),
    connections: ConnectionManager = Depends(get_connection_manager),
) -> None:
    """
    Live feed endpoint.
    Every message posted after the connection opens is pushed to the client.
    """
    user = sessions.resolve(token) if token else None
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await connections.connect(websocket, token)
    try:
        while True:
            # Messages are posted via HTTP; reading only detects disconnects.
            await websocket.receive_text()
    except WebSocketDisconnect:
        connections.disconnect(websocket)

"""
WebSocket Connection Manager.
Keeps track of live feed subscribers and pushes new messages to them.
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import WebSocket, status

from msgboard.core.message import Message
from msgboard.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self, sessions: SessionRegistry) -> None:
        self.sessions = sessions
        # socket -> bearer token it connected with
        self.active_connections: Dict[WebSocket, str] = {}

    async def connect(self, websocket: WebSocket, token: str) -> None:
        """
        Accepts a new WebSocket connection.
        """
        await websocket.accept()
        self.active_connections[websocket] = token
        logger.info("WS connected. Total: %d", len(self.active_connections))

    def disconnect(self, websocket: WebSocket) -> None:
        """
        Removes a WebSocket connection
        """
        if self.active_connections.pop(websocket, None) is not None:
            logger.info("WS disconnected. Total: %d", len(self.active_connections))

    async def broadcast(self, message: Message) -> None:
        """
        Sends a message to every connected client concurrently.
        Clients whose session ended are closed, unreachable ones are dropped.
        """
        payload = message.model_dump(mode="json")
        connections = list(self.active_connections.items())

        results = await asyncio.gather(
            *(self._deliver(websocket, token, payload) for websocket, token in connections),
            return_exceptions=True,
        )

        for (websocket, _), result in zip(connections, results):
            if isinstance(result, Exception):
                logger.warning("Error sending to WS, dropping client: %s", result)
                self.disconnect(websocket)

    async def _deliver(self, websocket: WebSocket, token: str, payload: Dict[str, Any]) -> None:
        if self.sessions.resolve(token) is None:
            logger.info("Closing WS with a revoked or expired session")
            self.disconnect(websocket)
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await websocket.send_json(payload)

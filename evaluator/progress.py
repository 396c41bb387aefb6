from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Optional, Protocol

from fastapi import WebSocket

from core.types import utcnow_iso

logger = logging.getLogger(__name__)


class ProgressChannel(Protocol):
    """Outbound message channel for dashboard observers."""

    async def broadcast(self, message: Dict[str, Any]) -> None:
        ...

    async def send_to(self, client_id: str, message: Dict[str, Any]) -> None:
        ...


class NullChannel:
    """Channel that discards every message."""

    async def broadcast(self, message: Dict[str, Any]) -> None:
        return None

    async def send_to(self, client_id: str, message: Dict[str, Any]) -> None:
        return None


class ConnectionManager:
    """Tracks live websocket connections and fans messages out to them."""

    def __init__(self) -> None:
        self._connections: Dict[str, WebSocket] = {}

    @property
    def client_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        client_id = uuid.uuid4().hex
        self._connections[client_id] = websocket
        logger.info("Websocket client %s connected (%s total).", client_id, self.client_count)
        await self.send_to(
            client_id,
            {
                "type": "connection",
                "message": "Welcome! You are connected to the LLM Efficiency Validator server.",
                "clientId": client_id,
                "clientCount": self.client_count,
                "timestamp": utcnow_iso(),
            },
        )
        return client_id

    async def disconnect(self, client_id: str) -> None:
        removed = self._connections.pop(client_id, None)
        if removed is None:
            return
        logger.info("Websocket client %s disconnected (%s remaining).", client_id, self.client_count)
        await self.broadcast(
            {
                "type": "notification",
                "message": f"A client disconnected. Current connections: {self.client_count}",
                "timestamp": utcnow_iso(),
            }
        )

    async def send_to(self, client_id: str, message: Dict[str, Any]) -> None:
        websocket = self._connections.get(client_id)
        if websocket is None:
            logger.debug("Dropping message for unknown client %s", client_id)
            return
        if not await self._send(client_id, websocket, message):
            self._drop(client_id)

    async def broadcast(self, message: Dict[str, Any], exclude: Optional[str] = None) -> None:
        targets = [
            (client_id, websocket)
            for client_id, websocket in list(self._connections.items())
            if client_id != exclude
        ]
        dead = [
            client_id
            for client_id, websocket in targets
            if not await self._send(client_id, websocket, message)
        ]
        for client_id in dead:
            self._drop(client_id)

    async def handle_message(self, client_id: str, raw: str) -> None:
        """Echo a client message back to its sender and relay it to everyone else."""

        try:
            payload = json.loads(raw)
            text = payload.get("text") if isinstance(payload, dict) else None
        except ValueError as exc:
            await self.send_to(
                client_id,
                {"type": "error", "message": "Error processing message", "error": str(exc)},
            )
            return

        logger.debug("Received message from %s: %r", client_id, text)
        await self.send_to(
            client_id,
            {
                "type": "echo",
                "originalMessage": text,
                "serverResponse": f'Server received: "{text}"',
                "clientCount": self.client_count,
                "timestamp": utcnow_iso(),
            },
        )
        await self.broadcast(
            {
                "type": "broadcast",
                "message": text,
                "source": "broadcast",
                "timestamp": utcnow_iso(),
            },
            exclude=client_id,
        )

    async def _send(self, client_id: str, websocket: WebSocket, message: Dict[str, Any]) -> bool:
        try:
            await websocket.send_json(message)
        except Exception as exc:
            logger.warning("Send to websocket client %s failed: %s", client_id, exc)
            return False
        return True

    def _drop(self, client_id: str) -> None:
        self._connections.pop(client_id, None)

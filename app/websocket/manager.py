"""
WebSocket connection manager for citizen and admin dashboards
"""
from typing import Dict, Set, Optional
from fastapi import WebSocket
import logging

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open dashboard sockets per citizen and for admins"""

    def __init__(self):
        # user_id -> open sockets for that citizen
        self.citizen_connections: Dict[str, Set[WebSocket]] = {}
        self.admin_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket, user_id: str, is_admin: bool = False):
        """Accept the socket and register it under the user and, for admins, the admin set"""
        await websocket.accept()
        self.citizen_connections.setdefault(user_id, set()).add(websocket)
        if is_admin:
            self.admin_connections.add(websocket)
        logger.info(f"Dashboard socket connected for {user_id} (admin={is_admin})")

    def disconnect(self, websocket: WebSocket, user_id: Optional[str] = None):
        self.admin_connections.discard(websocket)
        if user_id and user_id in self.citizen_connections:
            self.citizen_connections[user_id].discard(websocket)
            if not self.citizen_connections[user_id]:
                del self.citizen_connections[user_id]
        logger.info(f"Dashboard socket disconnected for {user_id}")

    async def send_to_user(self, message: dict, user_id: str):
        """Send message to every socket of one citizen"""
        sockets = self.citizen_connections.get(user_id)
        if not sockets:
            return
        dead = await self._send_all(message, sockets)
        for conn in dead:
            self.disconnect(conn, user_id)

    async def broadcast_to_admin(self, message: dict):
        dead = await self._send_all(message, self.admin_connections)
        for conn in dead:
            self.admin_connections.discard(conn)

    async def notify_owner_and_admins(self, message: dict, owner_id: str):
        await self.send_to_user(message, owner_id)
        await self.broadcast_to_admin(message)

    async def _send_all(self, message: dict, sockets: Set[WebSocket]) -> Set[WebSocket]:
        dead = set()
        for connection in list(sockets):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.error(f"Dropping dashboard socket after send failure: {e}")
                dead.add(connection)
        return dead


# Global connection manager instance
manager = ConnectionManager()

"""
WebSocket connection manager for real-time generation updates.
"""

from typing import Dict, List
from fastapi import WebSocket


class ConnectionManager:
    """Manage WebSocket connections per deck session."""

    def __init__(self):
        # session_id -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, session_id: str, websocket: WebSocket):
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.setdefault(session_id, []).append(websocket)

    def disconnect(self, session_id: str, websocket: WebSocket):
        """Remove a WebSocket connection."""
        connections = self.active_connections.get(session_id)
        if connections is None:
            return

        if websocket in connections:
            connections.remove(websocket)

        # Clean up empty lists
        if not connections:
            del self.active_connections[session_id]

    def close_session(self, session_id: str):
        """Forget every connection of a discarded session."""
        self.active_connections.pop(session_id, None)

    async def broadcast(self, session_id: str, message: str):
        """Send a message to every subscriber of a session."""
        dead_connections = []

        for websocket in list(self.active_connections.get(session_id, [])):
            try:
                await websocket.send_text(message)
            except Exception:
                dead_connections.append(websocket)

        for websocket in dead_connections:
            self.disconnect(session_id, websocket)

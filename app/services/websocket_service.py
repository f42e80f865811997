from fastapi import WebSocket
from typing import Dict, Set
import logging
import time
from collections import defaultdict

from pydantic import BaseModel

from app.schemas.events import encode_event

logger = logging.getLogger(__name__)


class ChannelManager:
    """Tracks which sockets are subscribed to which post channel and fans out events."""

    def __init__(self):
        self.channels: Dict[str, Set[WebSocket]] = defaultdict(set)
        self.connection_metadata: Dict[WebSocket, Dict] = {}

    async def connect(self, websocket: WebSocket, channel: str, user_id: int):
        await websocket.accept()
        self.subscribe(websocket, channel, user_id)

    def subscribe(self, websocket: WebSocket, channel: str, user_id: int):
        self.connection_metadata[websocket] = {
            'channel': channel,
            'user_id': user_id,
            'connected_at': time.time()
        }
        self.channels[channel].add(websocket)
        logger.info(f"📡 Connection added to {channel} (total: {len(self.channels[channel])})")

    def disconnect(self, websocket: WebSocket):
        metadata = self.connection_metadata.pop(websocket, {})
        channel = metadata.get('channel')
        if channel is None:
            return

        connections = self.channels.get(channel)
        if connections is not None:
            connections.discard(websocket)
            if not connections:
                del self.channels[channel]

    async def publish(self, channel: str, event: BaseModel):
        if channel not in self.channels:
            logger.debug(f"No subscribers on {channel}")
            return

        message_str = encode_event(event)
        dead_connections = set()

        for websocket in self.channels[channel].copy():
            try:
                await websocket.send_text(message_str)
            except Exception as e:
                logger.warning(f"Failed to publish to {channel}: {e}")
                dead_connections.add(websocket)

        for websocket in dead_connections:
            self.disconnect(websocket)

    async def send_to(self, websocket: WebSocket, event: BaseModel):
        try:
            await websocket.send_text(encode_event(event))
        except Exception as e:
            logger.warning(f"Failed to reply on socket: {e}")
            self.disconnect(websocket)

    def get_connection_stats(self) -> dict:
        return {
            'channels': {k: len(v) for k, v in self.channels.items()},
            'total_connections': len(self.connection_metadata),
        }


channel_manager = ChannelManager()

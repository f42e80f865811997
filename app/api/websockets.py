from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import BaseModel
from typing import Annotated
import logging

from app.core.dependencies import get_event_bridge
from app.schemas.events import channel_name
from app.services.event_bridge import ChannelSession, CommentEventBridge
from app.services.websocket_auth_service import websocket_auth_manager
from app.services.websocket_service import channel_manager

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws/posts/{post_id}")
async def websocket_post_channel(
    websocket: WebSocket,
    post_id: str,
    bridge: Annotated[CommentEventBridge, Depends(get_event_bridge)],
):
    channel = channel_name(post_id)

    user_id = await websocket_auth_manager.authenticate_connection(websocket, channel)
    if user_id is None:
        return

    await channel_manager.connect(websocket, channel, user_id)
    session = ChannelSession(user_id=user_id, post_id=post_id)

    async def reply(event: BaseModel) -> None:
        await channel_manager.send_to(websocket, event)

    try:
        while True:
            data = await websocket.receive_text()
            _ = await bridge.handle(session, data, reply)
    except WebSocketDisconnect:
        logger.info(f"📡 {channel} connection of user {user_id} disconnected")
    finally:
        channel_manager.disconnect(websocket)

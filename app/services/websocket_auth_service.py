from fastapi import WebSocket

from ..core.auth import user_id_from_token
from ..core.logging import SocketLogger


class WebSocketAuthManager:
    """Checks the access token presented when a socket joins a post channel."""

    @staticmethod
    def extract_token(websocket: WebSocket) -> str | None:
        return websocket.query_params.get("token") or websocket.cookies.get(
            "access_token"
        )

    async def authenticate_connection(
        self, websocket: WebSocket, channel: str
    ) -> int | None:
        token = self.extract_token(websocket)
        if not token:
            SocketLogger.log_connection(
                websocket, channel, accepted=False, failure_reason="missing_token"
            )
            await websocket.close(code=4001, reason="No access token")
            return None

        user_id = user_id_from_token(token)
        if user_id is None:
            SocketLogger.log_connection(
                websocket, channel, accepted=False, failure_reason="invalid_token"
            )
            await websocket.close(code=4001, reason="Invalid token")
            return None

        SocketLogger.log_connection(websocket, channel, accepted=True, user_id=user_id)
        return user_id


websocket_auth_manager = WebSocketAuthManager()

import logging
import json
from datetime import datetime, timezone
from fastapi import WebSocket

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

socket_logger = logging.getLogger("socket")
protocol_logger = logging.getLogger("protocol")


def configure_logging(level: str) -> None:
    logging.getLogger().setLevel(level)


def get_socket_client(websocket: WebSocket) -> str:
    return (
        websocket.headers.get("x-forwarded-for", "").split(",")[0].strip()
        or websocket.headers.get("x-real-ip", "")
        or getattr(websocket.client, "host", "unknown")
        if websocket.client
        else "unknown"
    )


class SocketLogger:
    @staticmethod
    def log_connection(
        websocket: WebSocket,
        channel: str,
        accepted: bool,
        user_id: int | None = None,
        failure_reason: str | None = None,
    ):
        log_data: dict[str, object] = {
            "event_type": "channel_connect",
            "channel": channel,
            "accepted": accepted,
            "client": get_socket_client(websocket),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if user_id is not None:
            log_data["user_id"] = user_id
        if failure_reason:
            log_data["failure_reason"] = failure_reason

        message = f"Channel connection {'accepted' if accepted else 'rejected'}: {json.dumps(log_data)}"

        if accepted:
            socket_logger.info(message)
        else:
            socket_logger.warning(message)

    @staticmethod
    def log_dropped_event(
        channel: str,
        event_type: str | None,
        reason: str,
        user_id: int | None = None,
    ):
        log_data: dict[str, object] = {
            "event_type": "event_dropped",
            "channel": channel,
            "message_type": event_type,
            "reason": reason,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if user_id is not None:
            log_data["user_id"] = user_id

        protocol_logger.warning(f"Dropped inbound event: {json.dumps(log_data)}")

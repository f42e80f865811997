import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import BaseModel

from app.core.exceptions import CommentServiceError, UnknownEventType
from app.core.logging import SocketLogger
from app.schemas.comment import Comment
from app.schemas.events import (
    CreateCommentEvent,
    DeleteCommentEvent,
    UpdateCommentEvent,
    channel_name,
    decode_inbound,
    edit_comment_event,
    error_event,
    new_comment_event,
    remove_comment_event,
)
from app.services.comment_service import CommentService

logger = logging.getLogger(__name__)

Reply = Callable[[BaseModel], Awaitable[None]]


class ChannelPublisher(Protocol):
    async def publish(self, channel: str, event: BaseModel) -> None:
        ...


@dataclass(frozen=True)
class ChannelSession:
    """An authenticated connection: who is speaking, on which post channel."""

    user_id: int
    post_id: str

    @property
    def channel(self) -> str:
        return channel_name(self.post_id)


class CommentEventBridge:
    """
    Couples the comment service to channel broadcasts.

    Only the authoritative result of a successful service call is published.
    Rejected requests produce nothing on the channel; over a socket they are
    answered with an ``error`` event to the originating connection.
    """

    service: CommentService
    publisher: ChannelPublisher

    def __init__(self, service: CommentService, publisher: ChannelPublisher):
        self.service = service
        self.publisher = publisher

    async def create(self, user_id: int, post_id: str, body: str) -> Comment:
        comment = await self.service.create(user_id, post_id, body)
        await self.publisher.publish(
            channel_name(comment.post_id), new_comment_event(comment)
        )
        return comment

    async def update(self, comment_id: str, user_id: int, body: str) -> Comment:
        comment = await self.service.update(comment_id, user_id, body)
        await self.publisher.publish(
            channel_name(comment.post_id), edit_comment_event(comment)
        )
        return comment

    async def delete(self, comment_id: str, user_id: int) -> None:
        # removal is announced on the post the stored comment belongs to
        existing = await self.service.get_by_id(comment_id)
        await self.service.delete(comment_id, user_id)
        await self.publisher.publish(
            channel_name(existing.post_id), remove_comment_event(comment_id)
        )

    async def handle(
        self,
        session: ChannelSession,
        raw: str | bytes | dict[str, Any],
        reply: Reply,
    ) -> str | None:
        """
        Process one inbound message. Returns the outbound event type that was
        broadcast, or None when the message was dropped or rejected.
        """
        try:
            event = decode_inbound(raw)
        except UnknownEventType as e:
            SocketLogger.log_dropped_event(
                session.channel, e.event_type, "unknown_type", session.user_id
            )
            return None
        except CommentServiceError as e:
            SocketLogger.log_dropped_event(
                session.channel, None, "malformed", session.user_id
            )
            await reply(error_event(e))
            return None

        try:
            if isinstance(event, CreateCommentEvent):
                _ = await self.create(
                    session.user_id, event.payload.post_id, event.payload.body
                )
                return "new_comment"
            elif isinstance(event, UpdateCommentEvent):
                _ = await self.update(
                    event.payload.comment_id, session.user_id, event.payload.body
                )
                return "edit_comment"
            elif isinstance(event, DeleteCommentEvent):
                await self.delete(event.payload.comment_id, session.user_id)
                return "remove_comment"
            else:
                SocketLogger.log_dropped_event(
                    session.channel, getattr(event, "type", None), "unhandled_type", session.user_id
                )
                return None
        except CommentServiceError as e:
            logger.info(
                f"Rejected {event.type} from user {session.user_id} on {session.channel}: {e.code}"
            )
            await reply(error_event(e, request_type=event.type))
            return None

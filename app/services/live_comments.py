import logging
from typing import Any

from pydantic import BaseModel

from app.core.exceptions import InvalidArgument, UnknownEventType
from app.schemas.comment import Comment
from app.schemas.events import (
    EditCommentEvent,
    ErrorEvent,
    NewCommentEvent,
    RemoveCommentEvent,
    decode_outbound,
)

logger = logging.getLogger(__name__)


class LiveCommentList:
    """
    Client-side view of one post's comments, kept in sync from channel events.

    Deliveries may be duplicated or arrive out of order across originators,
    so every event is applied idempotently: a repeated ``new_comment`` keeps a
    single entry, and edits or removals for an unknown id change nothing.
    """

    def __init__(self, comments: list[Comment] | None = None):
        self._entries: dict[str, Comment] = {}
        if comments:
            self.load(comments)

    def load(self, comments: list[Comment]) -> None:
        self._entries = {comment.id: comment for comment in comments}

    @property
    def comments(self) -> list[Comment]:
        return list(self._entries.values())

    def get(self, comment_id: str) -> Comment | None:
        return self._entries.get(comment_id)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self._entries

    def apply_raw(self, raw: str | bytes | dict[str, Any]) -> bool:
        try:
            event = decode_outbound(raw)
        except UnknownEventType as e:
            logger.warning(f"Ignoring unknown event type '{e.event_type}'")
            return False
        except InvalidArgument as e:
            logger.warning(f"Ignoring malformed event: {e.message}")
            return False

        return self.apply(event)

    def apply(self, event: BaseModel) -> bool:
        """Apply one outbound event. Returns True when the view changed."""
        if isinstance(event, NewCommentEvent):
            comment = event.payload
            if comment.id in self._entries:
                return False
            self._entries[comment.id] = comment
            return True

        elif isinstance(event, EditCommentEvent):
            current = self._entries.get(event.payload.id)
            if current is None:
                return False

            updated_at = event.payload.updated_at
            if updated_at is not None and updated_at < current.updated_at:
                return False

            self._entries[current.id] = current.model_copy(
                update={
                    "body": event.payload.body,
                    "updated_at": updated_at or current.updated_at,
                }
            )
            return True

        elif isinstance(event, RemoveCommentEvent):
            return self._entries.pop(event.payload.comment_id, None) is not None

        elif isinstance(event, ErrorEvent):
            logger.info(
                f"Server rejected {event.payload.request_type}: {event.payload.code}"
            )
            return False

        logger.warning(f"Ignoring unhandled event {type(event).__name__}")
        return False

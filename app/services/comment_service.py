import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TypeVar

from app.core.exceptions import (
    PASS_THROUGH_ERRORS,
    DeadlineExceeded,
    Internal,
    InvalidArgument,
    InvalidID,
    Unauthorized,
)
from app.schemas.comment import (
    Comment,
    Filter,
    PaginationMetadata,
    new_comment_id,
)
from app.services.ports import Creator, Deleter, Provider, Updater, UserProvider

T = TypeVar("T")

DEFAULT_BODY_MAX_LENGTH = 2000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_user_id(user_id: int) -> None:
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise InvalidID(f"Invalid user id: {user_id!r}")


def _validate_str_id(value: str, name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidID(f"Invalid {name}: {value!r}")


class CommentService:
    """
    Comment lifecycle orchestration.

    Each method validates its input, issues a bounded sequence of port calls
    and maps failures to the error taxonomy in ``app.core.exceptions``.
    Mutations are authorized against the stored comment's author only.
    The service keeps no state between calls.
    """

    provider: Provider
    creator: Creator
    updater: Updater
    deleter: Deleter
    user_provider: UserProvider

    def __init__(
        self,
        provider: Provider,
        creator: Creator,
        updater: Updater,
        deleter: Deleter,
        user_provider: UserProvider,
        *,
        logger: logging.Logger | None = None,
        timeout: float | None = None,
        body_max_length: int = DEFAULT_BODY_MAX_LENGTH,
        clock: Callable[[], datetime] | None = None,
    ):
        self.provider = provider
        self.creator = creator
        self.updater = updater
        self.deleter = deleter
        self.user_provider = user_provider
        self.log = logger or logging.getLogger(__name__)
        self.timeout = timeout
        self.body_max_length = body_max_length
        self.clock = clock or _utcnow

    async def create(self, user_id: int, post_id: str, body: str) -> Comment:
        op = "service.comment.create"
        _validate_user_id(user_id)
        _validate_str_id(post_id, "post id")
        self._validate_body(body)

        async with self._deadline(op):
            user = await self._call(op, self.user_provider.get_user(user_id))

            now = self.clock()
            comment = Comment(
                id=new_comment_id(),
                post_id=post_id,
                user=user,
                body=body,
                created_at=now,
                updated_at=now,
            )
            return await self._call(op, self.creator.create_comment(comment))

    async def update(self, comment_id: str, user_id: int, body: str) -> Comment:
        op = "service.comment.update"
        _validate_str_id(comment_id, "comment id")
        _validate_user_id(user_id)
        self._validate_body(body)

        async with self._deadline(op):
            existing = await self._call(op, self.provider.get_comment(comment_id))

            if existing.user.id != user_id:
                raise Unauthorized()

            changed = existing.model_copy(
                update={
                    "body": body,
                    "updated_at": max(self.clock(), existing.updated_at),
                }
            )
            return await self._call(op, self.updater.update_comment(changed))

    async def delete(self, comment_id: str, user_id: int) -> None:
        op = "service.comment.delete"
        _validate_str_id(comment_id, "comment id")
        _validate_user_id(user_id)

        async with self._deadline(op):
            existing = await self._call(op, self.provider.get_comment(comment_id))

            if existing.user.id != user_id:
                raise Unauthorized()

            await self._call(op, self.deleter.delete_comment(comment_id))

    async def get_by_id(self, comment_id: str) -> Comment:
        op = "service.comment.get_by_id"
        _validate_str_id(comment_id, "comment id")

        async with self._deadline(op):
            return await self._call(op, self.provider.get_comment(comment_id))

    async def list_by_post_id(
        self, post_id: str, filter: Filter | None = None
    ) -> tuple[list[Comment], PaginationMetadata]:
        op = "service.comment.list_by_post_id"
        _validate_str_id(post_id, "post id")

        async with self._deadline(op):
            comments, metadata = await self._call(
                op, self.provider.list_post_comments(post_id, filter or Filter())
            )
            return list(comments), metadata

    def _validate_body(self, body: str) -> None:
        if not isinstance(body, str) or not body.strip():
            raise InvalidArgument("Comment body must not be empty")
        if len(body) > self.body_max_length:
            raise InvalidArgument(
                f"Comment body exceeds {self.body_max_length} characters"
            )

    async def _call(self, op: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except PASS_THROUGH_ERRORS:
            raise
        except Exception as e:
            self.log.error(f"{op}: {type(e).__name__}: {e}", extra={"op": op})
            raise Internal() from None

    @asynccontextmanager
    async def _deadline(self, op: str) -> AsyncIterator[None]:
        try:
            async with asyncio.timeout(self.timeout):
                yield
        except TimeoutError:
            raise DeadlineExceeded(f"{op} timed out after {self.timeout}s") from None

from typing import Protocol

from app.schemas.comment import Comment, Filter, PaginationMetadata, User


class Provider(Protocol):
    """
    Read side of comment storage.

    ``get_comment`` raises ``CommentNotFound`` for a missing id;
    implementations may raise ``InvalidID`` for ids they cannot parse.
    """

    async def get_comment(self, comment_id: str) -> Comment:
        ...

    async def list_post_comments(
        self, post_id: str, filter: Filter
    ) -> tuple[list[Comment], PaginationMetadata]:
        ...


class Creator(Protocol):
    async def create_comment(self, comment: Comment) -> Comment:
        """Persist a new comment; the returned value may be normalized by storage."""
        ...


class Updater(Protocol):
    async def update_comment(self, comment: Comment) -> Comment:
        ...


class Deleter(Protocol):
    async def delete_comment(self, comment_id: str) -> None:
        """Hard delete; raises ``CommentNotFound`` when nothing was removed."""
        ...


class UserProvider(Protocol):
    async def get_user(self, user_id: int) -> User:
        """Resolve an identity; raises ``UserNotFound`` when absent."""
        ...

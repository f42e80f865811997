from .comment import (
    Comment,
    CommentCreate,
    CommentPage,
    CommentUpdate,
    Filter,
    PaginationMetadata,
    User,
)
from .common import ErrorResponse

__all__ = [
    "Comment",
    "CommentCreate",
    "CommentPage",
    "CommentUpdate",
    "ErrorResponse",
    "Filter",
    "PaginationMetadata",
    "User",
]

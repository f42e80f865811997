from .base import Base
from .comment import Comment

__all__ = [
    "Base",
    "Comment",
]

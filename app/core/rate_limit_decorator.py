from functools import wraps
from fastapi import HTTPException, status
from typing import Awaitable, Callable, TypeVar
import logging
import time

from ..config import settings

T = TypeVar('T')

logger = logging.getLogger(__name__)


class CommentRateLimiter:
    """Sliding one-minute window of comment mutations per user."""

    def __init__(self, limit_per_minute: int):
        self.limit = limit_per_minute
        self.attempts: dict[int, list[float]] = {}

    def check_rate_limit(self, user_id: int) -> dict[str, object]:
        now = time.time()
        minute_ago = now - 60

        attempts = self.attempts.setdefault(user_id, [])
        attempts[:] = [timestamp for timestamp in attempts if timestamp > minute_ago]

        if len(attempts) >= self.limit:
            return {
                "allowed": False,
                "reason": "comment_limit_exceeded",
                "current_count": len(attempts),
                "limit": self.limit,
                "retry_after": max(1, int(attempts[0] + 60 - now)),
            }

        attempts.append(now)

        return {
            "allowed": True,
            "remaining": self.limit - len(attempts),
            "limit": self.limit,
        }


comment_rate_limiter = CommentRateLimiter(settings.COMMENT_RATE_LIMIT_PER_MINUTE)


def comment_rate_limit(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    @wraps(func)
    async def wrapper(*args: object, **kwargs: object) -> T:
        user_id = kwargs.get("current_user_id")
        if not isinstance(user_id, int):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required for rate limiting"
            )

        rate_check = comment_rate_limiter.check_rate_limit(user_id)

        if not rate_check["allowed"]:
            logger.warning(f"Comment rate limit exceeded by user {user_id}: {rate_check}")

            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "error": "Rate limit exceeded",
                    "reason": rate_check["reason"],
                    "limit": rate_check["limit"],
                    "retry_after": rate_check["retry_after"],
                },
                headers={
                    "Retry-After": str(rate_check["retry_after"]),
                    "X-RateLimit-Type": "comment",
                }
            )

        return await func(*args, **kwargs)

    return wrapper

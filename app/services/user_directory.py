import logging
from typing import Any, cast

import httpx

from app.core.exceptions import UserNotFound
from app.schemas.comment import User

logger = logging.getLogger(__name__)


class UserDirectoryClient:
    """
    Resolves author identities from the user directory service.

    ``GET {base_url}/users/{id}`` answers ``{"id", "name", "avatar_url"}``.
    A 404 maps to ``UserNotFound``; any other failure is raised as-is for the
    comment service to classify.
    """

    TIMEOUT: float = 5.0

    base_url: str
    timeout: float
    transport: httpx.AsyncBaseTransport | None

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else self.TIMEOUT
        self.transport = transport

    async def get_user(self, user_id: int) -> User:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            response = await client.get(f"/users/{user_id}")

            if response.status_code == 404:
                logger.info(f"User directory has no user {user_id}")
                raise UserNotFound(user_id)

            _ = response.raise_for_status()

            data: dict[str, Any] = cast(dict[str, Any], response.json())

        return User(
            id=int(data.get("id", user_id)),
            name=str(data.get("name") or ""),
            avatar_url=data.get("avatar_url"),
        )

import httpx
import pytest

from app.core.exceptions import Internal, UserNotFound
from app.services.comment_service import CommentService
from app.services.user_directory import UserDirectoryClient
from .test_utils import InMemoryCommentStore


def directory_transport(users: dict[int, dict], status_override: int | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if status_override is not None:
            return httpx.Response(status_override, json={"detail": "boom"})

        user_id = int(request.url.path.rsplit("/", 1)[-1])
        if user_id not in users:
            return httpx.Response(404, json={"detail": "not found"})
        return httpx.Response(200, json=users[user_id])

    return httpx.MockTransport(handler)


class TestUserDirectoryClient:

    @pytest.mark.asyncio
    async def test_resolves_user(self):
        client = UserDirectoryClient(
            "http://directory.test/",
            transport=directory_transport(
                {42: {"id": 42, "name": "Ann", "avatar_url": "https://img.example.com/ann.png"}}
            ),
        )

        user = await client.get_user(42)

        assert user.id == 42
        assert user.name == "Ann"
        assert user.avatar_url == "https://img.example.com/ann.png"

    @pytest.mark.asyncio
    async def test_missing_user(self):
        client = UserDirectoryClient("http://directory.test", transport=directory_transport({}))

        with pytest.raises(UserNotFound):
            await client.get_user(42)

    @pytest.mark.asyncio
    async def test_server_error_is_raised_raw(self):
        client = UserDirectoryClient(
            "http://directory.test", transport=directory_transport({}, status_override=503)
        )

        with pytest.raises(httpx.HTTPStatusError):
            await client.get_user(42)

    @pytest.mark.asyncio
    async def test_service_collapses_directory_failure_to_internal(self):
        store = InMemoryCommentStore()
        client = UserDirectoryClient(
            "http://directory.test", transport=directory_transport({}, status_override=500)
        )
        service = CommentService(store, store, store, store, client)

        with pytest.raises(Internal):
            await service.create(42, "P1", "hi")

        assert store.mutations == []

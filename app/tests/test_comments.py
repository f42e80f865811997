import pytest
from httpx import AsyncClient
from fastapi import status

from app.core import rate_limit_decorator
from app.core.rate_limit_decorator import CommentRateLimiter
from app.schemas.events import EditCommentEvent, NewCommentEvent, RemoveCommentEvent
from .test_utils import CARA, access_token, auth_headers, make_comment
from datetime import timedelta


class TestCommentsPublic:

    @pytest.mark.asyncio
    async def test_list_comments_of_post(self, async_client: AsyncClient, store):
        store.add(make_comment("C1"))
        store.add(make_comment("C2", post_id="P2"))

        response = await async_client.get("/api/posts/P1/comments")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [c["id"] for c in data["items"]] == ["C1"]
        assert data["metadata"]["total_records"] == 1

    @pytest.mark.asyncio
    async def test_list_comments_with_pagination(self, async_client: AsyncClient, store):
        for i in range(3):
            store.add(make_comment(f"C{i}"))

        response = await async_client.get("/api/posts/P1/comments?page=2&page_size=2")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["items"]) == 1
        assert data["metadata"]["current_page"] == 2

    @pytest.mark.asyncio
    async def test_list_comments_rejects_bad_page_size(self, async_client: AsyncClient):
        response = await async_client.get("/api/posts/P1/comments?page_size=1000")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_get_comment(self, async_client: AsyncClient, store):
        store.add(make_comment("C1", user=CARA))

        response = await async_client.get("/api/comments/C1")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["id"] == 9

    @pytest.mark.asyncio
    async def test_get_nonexistent_comment(self, async_client: AsyncClient):
        response = await async_client.get("/api/comments/does-not-exist")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "comment_not_found"


class TestCommentsAuth:

    @pytest.mark.asyncio
    async def test_create_comment_without_auth(self, async_client: AsyncClient, publisher):
        response = await async_client.post("/api/posts/P1/comments", json={"body": "hi"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert publisher.published == []

    @pytest.mark.asyncio
    async def test_create_comment_with_expired_token(self, async_client: AsyncClient):
        token = access_token(42, expires_delta=timedelta(minutes=-5))

        response = await async_client.post(
            "/api/posts/P1/comments",
            json={"body": "hi"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_create_comment(self, async_client: AsyncClient, publisher):
        response = await async_client.post(
            "/api/posts/P1/comments", json={"body": "hi"}, headers=auth_headers(42)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user"] == {"id": 42, "name": "Ann", "avatar_url": None}
        assert data["created_at"] == data["updated_at"]

        assert len(publisher.published) == 1
        channel, event = publisher.published[0]
        assert channel == "post:P1"
        assert isinstance(event, NewCommentEvent)
        assert event.payload.id == data["id"]

    @pytest.mark.asyncio
    async def test_create_comment_with_cookie_token(self, async_client: AsyncClient):
        async_client.cookies.set("access_token", access_token(42))

        response = await async_client.post("/api/posts/P1/comments", json={"body": "hi"})

        assert response.status_code == status.HTTP_201_CREATED

    @pytest.mark.asyncio
    async def test_create_comment_blank_body(self, async_client: AsyncClient, publisher):
        response = await async_client.post(
            "/api/posts/P1/comments", json={"body": "   "}, headers=auth_headers(42)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "invalid_argument"
        assert publisher.published == []

    @pytest.mark.asyncio
    async def test_create_comment_unknown_author(self, async_client: AsyncClient, publisher):
        response = await async_client.post(
            "/api/posts/P1/comments", json={"body": "hi"}, headers=auth_headers(999)
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "user_not_found"
        assert publisher.published == []

    @pytest.mark.asyncio
    async def test_update_comment_by_author(self, async_client: AsyncClient, store, publisher):
        store.add(make_comment("C1", user=CARA))

        response = await async_client.put(
            "/api/comments/C1", json={"body": "edited"}, headers=auth_headers(9)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["body"] == "edited"
        channel, event = publisher.published[0]
        assert channel == "post:P1"
        assert isinstance(event, EditCommentEvent)

    @pytest.mark.asyncio
    async def test_update_comment_by_other_user(self, async_client: AsyncClient, store, publisher):
        store.add(make_comment("C1", user=CARA))

        response = await async_client.put(
            "/api/comments/C1", json={"body": "edited"}, headers=auth_headers(7)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "unauthorized"
        assert store.mutations == []
        assert publisher.published == []

    @pytest.mark.asyncio
    async def test_update_nonexistent_comment(self, async_client: AsyncClient):
        response = await async_client.put(
            "/api/comments/999", json={"body": "edited"}, headers=auth_headers(9)
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_comment_by_author(self, async_client: AsyncClient, store, publisher):
        store.add(make_comment("C1", user=CARA))

        response = await async_client.delete("/api/comments/C1", headers=auth_headers(9))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert store.mutations == [("delete", "C1")]
        channel, event = publisher.published[0]
        assert channel == "post:P1"
        assert isinstance(event, RemoveCommentEvent)

    @pytest.mark.asyncio
    async def test_delete_comment_by_other_user(self, async_client: AsyncClient, store, publisher):
        store.add(make_comment("C1", user=CARA))

        response = await async_client.delete("/api/comments/C1", headers=auth_headers(7))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert "C1" in store.comments
        assert publisher.published == []

    @pytest.mark.asyncio
    async def test_delete_comment_without_auth(self, async_client: AsyncClient):
        response = await async_client.delete("/api/comments/1")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_delete_nonexistent_comment(self, async_client: AsyncClient):
        response = await async_client.delete("/api/comments/999", headers=auth_headers(9))

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestCommentRateLimit:

    def test_limiter_counts_per_user(self):
        limiter = CommentRateLimiter(limit_per_minute=2)

        assert limiter.check_rate_limit(42)["allowed"] is True
        assert limiter.check_rate_limit(42)["allowed"] is True
        assert limiter.check_rate_limit(42)["allowed"] is False
        assert limiter.check_rate_limit(9)["allowed"] is True

    @pytest.mark.asyncio
    async def test_create_over_limit_is_rejected(
        self, async_client: AsyncClient, publisher, monkeypatch
    ):
        monkeypatch.setattr(
            rate_limit_decorator, "comment_rate_limiter", CommentRateLimiter(limit_per_minute=1)
        )

        first = await async_client.post(
            "/api/posts/P1/comments", json={"body": "hi"}, headers=auth_headers(42)
        )
        second = await async_client.post(
            "/api/posts/P1/comments", json={"body": "again"}, headers=auth_headers(42)
        )

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert "Retry-After" in second.headers
        assert len(publisher.published) == 1

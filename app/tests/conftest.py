import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-min-32-chars")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

os.environ["RATE_LIMIT_PER_MINUTE"] = "1000"
os.environ["COMMENT_RATE_LIMIT_PER_MINUTE"] = "1000"

from app.main import app
from app.core.dependencies import get_comment_service, get_event_bridge
from app.services.comment_service import CommentService
from app.services.event_bridge import CommentEventBridge
from .test_utils import (
    ANN,
    BOB,
    CARA,
    DAN,
    InMemoryCommentStore,
    RecordingPublisher,
    StubUserDirectory,
)


@pytest.fixture
def store() -> InMemoryCommentStore:
    return InMemoryCommentStore()


@pytest.fixture
def users() -> StubUserDirectory:
    return StubUserDirectory(ANN, BOB, CARA, DAN)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def service(store: InMemoryCommentStore, users: StubUserDirectory) -> CommentService:
    return CommentService(store, store, store, store, users, timeout=5.0)


@pytest.fixture
def bridge(service: CommentService, publisher: RecordingPublisher) -> CommentEventBridge:
    return CommentEventBridge(service, publisher)


@pytest.fixture
def override_dependencies(service: CommentService, bridge: CommentEventBridge):
    app.dependency_overrides[get_comment_service] = lambda: service
    app.dependency_overrides[get_event_bridge] = lambda: bridge
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        timeout=30.0
    ) as ac:
        yield ac

import logging
from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.database import AsyncSessionLocal
from .auth import user_id_from_token
from ..services.comment_repository import SQLAlchemyCommentRepository
from ..services.comment_service import CommentService
from ..services.event_bridge import CommentEventBridge
from ..services.user_directory import UserDirectoryClient
from ..services.websocket_service import channel_manager

security = HTTPBearer(auto_error=False)

_comment_repository = SQLAlchemyCommentRepository(AsyncSessionLocal)
_user_directory = UserDirectoryClient(
    settings.USER_DIRECTORY_URL, timeout=settings.USER_DIRECTORY_TIMEOUT_SECONDS
)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    access_token: str | None = Cookie(None),
) -> int:
    token = credentials.credentials if credentials else access_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    user_id = user_id_from_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token"
        )

    return user_id


CurrentUserId = Annotated[int, Depends(get_current_user_id)]


def get_comment_service() -> CommentService:
    return CommentService(
        provider=_comment_repository,
        creator=_comment_repository,
        updater=_comment_repository,
        deleter=_comment_repository,
        user_provider=_user_directory,
        logger=logging.getLogger("app.services.comment_service"),
        timeout=settings.COMMENT_OPERATION_TIMEOUT_SECONDS,
        body_max_length=settings.COMMENT_BODY_MAX_LENGTH,
    )


def get_event_bridge(
    service: Annotated[CommentService, Depends(get_comment_service)],
) -> CommentEventBridge:
    return CommentEventBridge(service, channel_manager)


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
EventBridgeDep = Annotated[CommentEventBridge, Depends(get_event_bridge)]

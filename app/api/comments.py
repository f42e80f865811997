from fastapi import APIRouter, Query, status
from typing import Annotated, Literal

from app.core.dependencies import CommentServiceDep, CurrentUserId, EventBridgeDep
from app.core.rate_limit_decorator import comment_rate_limit
from app.schemas.comment import (
    Comment,
    CommentCreate,
    CommentPage,
    CommentUpdate,
    Filter,
)
from app.schemas.common import ErrorResponse

router = APIRouter()


@router.get(
    "/posts/{post_id}/comments",
    response_model=CommentPage,
    summary="List comments of a post",
    responses={400: {"model": ErrorResponse, "description": "Invalid post id"}},
)
async def list_post_comments(
    post_id: str,
    service: CommentServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
    sort_by: Annotated[Literal["created_at", "updated_at"], Query()] = "created_at",
    sort_order: Annotated[Literal["asc", "desc"], Query()] = "asc",
):
    comment_filter = Filter(
        page=page, page_size=page_size, sort_by=sort_by, sort_order=sort_order
    )
    comments, metadata = await service.list_by_post_id(post_id, comment_filter)

    return CommentPage(items=comments, metadata=metadata)


@router.post(
    "/posts/{post_id}/comments",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        429: {"description": "Too many comment changes"},
        404: {"model": ErrorResponse, "description": "Author not found"},
        422: {"model": ErrorResponse, "description": "Invalid comment body"},
    },
)
@comment_rate_limit
async def create_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user_id: CurrentUserId,
    bridge: EventBridgeDep,
):
    return await bridge.create(current_user_id, post_id, comment_data.body)


@router.get(
    "/comments/{comment_id}",
    response_model=Comment,
    responses={404: {"model": ErrorResponse, "description": "Comment not found"}},
)
async def get_comment(comment_id: str, service: CommentServiceDep):
    return await service.get_by_id(comment_id)


@router.put(
    "/comments/{comment_id}",
    response_model=Comment,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        429: {"description": "Too many comment changes"},
        403: {
            "model": ErrorResponse,
            "description": "Not authorized to edit this comment",
        },
        404: {"model": ErrorResponse, "description": "Comment not found"},
    },
)
@comment_rate_limit
async def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    current_user_id: CurrentUserId,
    bridge: EventBridgeDep,
):
    return await bridge.update(comment_id, current_user_id, comment_data.body)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        429: {"description": "Too many comment changes"},
        403: {
            "model": ErrorResponse,
            "description": "Not authorized to delete this comment",
        },
        404: {"model": ErrorResponse, "description": "Comment not found"},
    },
)
@comment_rate_limit
async def delete_comment(
    comment_id: str,
    current_user_id: CurrentUserId,
    bridge: EventBridgeDep,
):
    await bridge.delete(comment_id, current_user_id)

from sqlalchemy import asc, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import CommentNotFound
from app.models.comment import Comment as CommentRow
from app.schemas.comment import Comment, Filter, PaginationMetadata, User


def _to_domain(row: CommentRow) -> Comment:
    return Comment(
        id=row.id,
        post_id=row.post_id,
        user=User(id=row.user_id, name=row.user_name, avatar_url=row.user_avatar_url),
        body=row.body,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SQLAlchemyCommentRepository:
    """Storage adapter for the comment ports, one session per call."""

    session_factory: async_sessionmaker[AsyncSession]

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_comment(self, comment_id: str) -> Comment:
        async with self.session_factory() as db:
            row = await db.get(CommentRow, comment_id)
            if not row:
                raise CommentNotFound(comment_id)
            return _to_domain(row)

    async def list_post_comments(
        self, post_id: str, filter: Filter
    ) -> tuple[list[Comment], PaginationMetadata]:
        sort_column = getattr(CommentRow, filter.sort_by)
        order = asc if filter.sort_order == "asc" else desc

        async with self.session_factory() as db:
            total = await db.scalar(
                select(func.count()).select_from(CommentRow).where(CommentRow.post_id == post_id)
            )

            result = await db.execute(
                select(CommentRow)
                .where(CommentRow.post_id == post_id)
                .order_by(order(sort_column), order(CommentRow.id))
                .offset(filter.offset)
                .limit(filter.page_size)
            )
            rows = result.scalars().all()

        metadata = PaginationMetadata.calculate(total or 0, filter.page, filter.page_size)
        return [_to_domain(row) for row in rows], metadata

    async def create_comment(self, comment: Comment) -> Comment:
        row = CommentRow(
            id=comment.id,
            post_id=comment.post_id,
            body=comment.body,
            user_id=comment.user.id,
            user_name=comment.user.name,
            user_avatar_url=comment.user.avatar_url,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )

        async with self.session_factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return _to_domain(row)

    async def update_comment(self, comment: Comment) -> Comment:
        async with self.session_factory() as db:
            row = await db.get(CommentRow, comment.id)
            if not row:
                raise CommentNotFound(comment.id)

            row.body = comment.body
            row.updated_at = comment.updated_at

            await db.commit()
            await db.refresh(row)
            return _to_domain(row)

    async def delete_comment(self, comment_id: str) -> None:
        async with self.session_factory() as db:
            result = await db.execute(delete(CommentRow).where(CommentRow.id == comment_id))
            await db.commit()

        if result.rowcount == 0:
            raise CommentNotFound(comment_id)

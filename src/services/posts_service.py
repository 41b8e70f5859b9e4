"""
Posts service - business logic for post management
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select

from database.tables import PostRow, UserRow
from models.post import AuthorSummary, Post, PostCreate, PostUpdate, PostWithAuthor
from services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

NEWEST_FIRST = [{"field": "created_at", "dir": "desc"}, {"field": "id", "dir": "desc"}]


class PostsService(BaseService):
    """Service for post management operations"""

    def __init__(self, session_factory=None):
        super().__init__("posts", PostRow, Post, session_factory)

    async def create_post(self, post: PostCreate) -> ServiceResult:
        """
        Create a new post

        Args:
            post: Validated post creation data

        Returns:
            ServiceResult with the created post
        """
        logger.info(f"Creating new post by author: {post.author}")
        return await self.create(post.model_dump())

    async def get_post_by_id(self, post_id: int) -> ServiceResult:
        return await self.get_by_id(post_id)

    async def list_posts(self, limit: Optional[int] = None, offset: int = 0) -> ServiceResult:
        """All posts, newest first"""
        return await self.read(order_by=NEWEST_FIRST, limit=limit, offset=offset)

    async def get_posts_by_author(self, author: str) -> ServiceResult:
        """Posts whose author name matches exactly, newest first"""
        return await self.read(filters={"author": author}, order_by=NEWEST_FIRST)

    async def get_posts_by_author_id(self, author_id: int) -> ServiceResult:
        return await self.read(filters={"author_id": author_id}, order_by=NEWEST_FIRST)

    async def search_posts(self, query: str) -> ServiceResult:
        """Posts whose title contains ``query``, newest first"""
        return await self.read(
            filters={"title": {"op": "contains", "value": query}},
            order_by=NEWEST_FIRST
        )

    async def update_post(self, post_id: int, updates: PostUpdate) -> ServiceResult:
        """
        Apply a partial update to a post

        Only fields explicitly set on ``updates`` are written.
        """
        changes: Dict[str, Any] = updates.model_dump(exclude_unset=True)
        logger.info(f"Updating post {post_id} fields: {sorted(changes)}")
        return await self.update(post_id, changes)

    async def delete_post(self, post_id: int) -> ServiceResult:
        logger.info(f"Deleting post {post_id}")
        return await self.delete(post_id)

    async def list_posts_with_authors(self) -> ServiceResult:
        """
        All posts annotated with their author's public fields

        Uses a left outer join, so posts without an author reference are
        returned with ``user`` set to None.
        """
        try:
            query = (
                select(PostRow, UserRow)
                .outerjoin(UserRow, PostRow.author_id == UserRow.id)
                .order_by(PostRow.created_at.desc(), PostRow.id.desc())
            )
            async with self.session() as session:
                rows = (await session.execute(query)).all()
                records = []
                for post_row, user_row in rows:
                    post = self.to_record(post_row)
                    user = None
                    if user_row is not None:
                        user = AuthorSummary.model_construct(
                            id=user_row.id,
                            name=user_row.name,
                            email=user_row.email,
                            username=user_row.username,
                        )
                    records.append(PostWithAuthor.model_construct(**post.model_dump(), user=user))

            return ServiceResult(success=True, data=records, count=len(records))
        except Exception as e:
            return self._failure("Joined read", e)


# Global service instance
_posts_service: Optional[PostsService] = None


def get_posts_service() -> PostsService:
    """Get the global posts service instance"""
    global _posts_service
    if _posts_service is None:
        _posts_service = PostsService()
    return _posts_service

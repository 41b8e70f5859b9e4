"""
Users service - business logic for user management
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from database.tables import PostRow, UserRow
from models.user import User, UserCreate, UserUpdate, UserWithPosts
from services.base_service import BaseService, ServiceResult
from services.posts_service import PostsService

logger = logging.getLogger(__name__)

BY_NAME = [{"field": "name", "dir": "asc"}, {"field": "id", "dir": "asc"}]


class UsersService(BaseService):
    """Service for user management operations"""

    def __init__(self, session_factory=None):
        super().__init__("users", UserRow, User, session_factory)
        self._posts = PostsService(session_factory)

    async def create_user(self, user: UserCreate) -> ServiceResult:
        """
        Create a new user

        Args:
            user: Validated user creation data

        Returns:
            ServiceResult with the created user, or CONSTRAINT_VIOLATION
            when the email is already registered
        """
        logger.info(f"Creating new user: {user.email}")
        return await self.create(user.model_dump())

    async def get_user_by_id(self, user_id: int) -> ServiceResult:
        return await self.get_by_id(user_id)

    async def get_user_by_email(self, email: str) -> ServiceResult:
        """Exact, case-sensitive email lookup"""
        result = await self.get_by_field("email", email, limit=1)
        if result.success and not result.data:
            return self._not_found(email)
        return result

    async def list_users(self, limit: Optional[int] = None, offset: int = 0) -> ServiceResult:
        """All users ordered by name"""
        return await self.read(order_by=BY_NAME, limit=limit, offset=offset)

    async def update_user(self, user_id: int, updates: UserUpdate) -> ServiceResult:
        changes: Dict[str, Any] = updates.model_dump(exclude_unset=True)
        logger.info(f"Updating user {user_id} fields: {sorted(changes)}")
        return await self.update(user_id, changes)

    async def delete_user(self, user_id: int) -> ServiceResult:
        """
        Delete a user

        Posts written by the user are kept and lose their author reference.
        """
        logger.info(f"Deleting user {user_id}")
        return await self.delete(user_id)

    async def _before_delete(self, session: AsyncSession, record_id: int):
        await session.execute(
            update(PostRow).where(PostRow.author_id == record_id).values(author_id=None)
        )

    async def get_user_with_posts(self, user_id: int) -> ServiceResult:
        """A user together with the posts referencing them, newest first"""
        user_result = await self.get_user_by_id(user_id)
        if not user_result.success:
            return user_result

        posts_result = await self._posts.get_posts_by_author_id(user_id)
        if not posts_result.success:
            return posts_result

        user = UserWithPosts.model_construct(**user_result.record.model_dump(), posts=posts_result.data)
        return ServiceResult(success=True, data=[user], count=1)


# Global service instance
_users_service: Optional[UsersService] = None


def get_users_service() -> UsersService:
    """Get the global users service instance"""
    global _users_service
    if _users_service is None:
        _users_service = UsersService()
    return _users_service

"""
Seed the database with sample users and posts

Usage: python src/database/seed.py
"""

import asyncio
import logging
import os
import sys
from typing import Dict, List, Optional

if __name__ == "__main__":
    from dotenv import load_dotenv

    load_dotenv()
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.connection import close_database, init_database
from models.post import Post, PostCreate
from models.user import User, UserCreate
from services.posts_service import PostsService
from services.users_service import UsersService

logger = logging.getLogger(__name__)

SEED_USERS = [
    {
        "name": "John Doe",
        "email": "john@example.com",
        "username": "johndoe",
        "phone": "+1234567890",
        "website": "https://johndoe.dev"
    },
    {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "username": "janesmith",
        "phone": "+1234567891",
        "website": "https://janesmith.dev"
    },
    {
        "name": "Mike Johnson",
        "email": "mike@example.com",
        "username": "mikejohnson",
        "phone": "+1234567892",
        "website": "https://mikejohnson.dev"
    }
]

SEED_POSTS = [
    {
        "title": "Getting Started with Query Caching",
        "body": "A query cache keeps server state close to the interface. Fresh data is served from memory, "
                "stale data is refetched on the next read, and mutations invalidate the lists they touch.",
        "author": "John Doe"
    },
    {
        "title": "Form State Patterns",
        "body": "Keeping field values, errors and touched flags in one store makes live validation simple. "
                "Every change produces a new snapshot, so listeners can compare old and new state cheaply.",
        "author": "Jane Smith"
    },
    {
        "title": "Validating Input at the Boundary",
        "body": "Parse first, then validate, then persist. Malformed payloads and constraint violations are "
                "reported separately, and every offending field gets its own message.",
        "author": "Mike Johnson"
    },
    {
        "title": "Typed Records in Python",
        "body": "Declarative record schemas give one definition for parsing, validation and serialization. "
                "Derived create and update schemas drop the fields the store assigns.",
        "author": "John Doe"
    },
    {
        "title": "Working with Relational Joins",
        "body": "A left outer join keeps posts whose author reference is empty. The joined user fields are "
                "simply null, so no row goes missing from the listing.",
        "author": "Jane Smith"
    }
]


async def seed_database(
    users_service: Optional[UsersService] = None,
    posts_service: Optional[PostsService] = None
) -> Dict[str, List]:
    """Insert the sample users, then the sample posts linked to them round-robin"""
    users_service = users_service or UsersService()
    posts_service = posts_service or PostsService()
    logger.info("Seeding database...")

    users: List[User] = []
    for data in SEED_USERS:
        result = await users_service.create_user(UserCreate(**data))
        if not result.success:
            raise RuntimeError(f"Failed to seed user {data['email']}: {result.error}")
        users.append(result.record)
    logger.info(f"Inserted {len(users)} users")

    posts: List[Post] = []
    for index, data in enumerate(SEED_POSTS):
        author = users[index % len(users)]
        result = await posts_service.create_post(PostCreate(**data, author_id=author.id))
        if not result.success:
            raise RuntimeError(f"Failed to seed post '{data['title']}': {result.error}")
        posts.append(result.record)
    logger.info(f"Inserted {len(posts)} posts")

    return {"users": users, "posts": posts}


async def run_seed():
    """Open the configured store, seed it and close it"""
    await init_database()
    try:
        await seed_database()
    finally:
        await close_database()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run_seed())

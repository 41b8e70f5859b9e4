"""
pytest configuration and fixtures
In-process app over a fresh in-memory sqlite database per test
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest
import pytest_asyncio

from app import app
from client.api_client import ApiClient
from database.connection import close_database, init_database
from services.posts_service import PostsService
from services.users_service import UsersService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database():
    """Fresh schema for every test"""
    await init_database(TEST_DATABASE_URL)
    yield
    await close_database()


@pytest_asyncio.fixture
async def http_client(database):
    """httpx client wired straight to the ASGI app"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def api(http_client):
    """Client data layer API over the in-process app"""
    return ApiClient(client=http_client)


@pytest.fixture
def posts_service(database):
    return PostsService()


@pytest.fixture
def users_service(database):
    return UsersService()


@pytest.fixture
def post_payload():
    return {
        "title": "Hello World",
        "body": "This is a test body.",
        "author": "Jane",
    }


@pytest.fixture
def user_payload():
    return {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "username": "janesmith",
        "phone": "+1234567891",
        "website": "https://janesmith.dev",
    }

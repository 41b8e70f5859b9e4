"""
Client data layer over the in-process API: queries, mutations and invalidation
"""

import asyncio

import pytest

from client.api_client import ApiError
from client.queries import Mutation, MutationInProgressError, Query
from client.query_cache import QueryCache
from client.resources import POSTS_KEY, USERS_KEY, PostsQueries, UsersQueries
from database.connection import close_database
from models.post import PostCreate

pytestmark = pytest.mark.client


@pytest.fixture
def cache():
    return QueryCache(stale_time=60)


@pytest.fixture
def posts(api, cache):
    return PostsQueries(api, cache)


@pytest.fixture
def users(api, cache):
    return UsersQueries(api, cache)


class TestPostsQueries:

    async def test_list_loads_into_cache(self, posts, cache):
        data = await posts.list.load()

        assert data == []
        assert posts.list.data == []
        assert not posts.list.is_stale
        assert not posts.list.is_loading
        assert posts.list.error is None
        assert cache.get_data(POSTS_KEY) == []

    async def test_create_invalidates_and_next_load_sees_new_post(self, posts, post_payload):
        await posts.list.load()

        created = await posts.create.mutate(post_payload)

        assert posts.create.is_success
        assert posts.create.data == created
        assert posts.list.is_stale
        titles = [post["title"] for post in await posts.list.load()]
        assert titles == ["Hello World"]

    async def test_validation_failure_surfaces_details(self, posts):
        with pytest.raises(ApiError) as exc_info:
            await posts.create.mutate_async({"title": "Hi", "body": "short", "author": "A"})

        error = exc_info.value
        assert error.status_code == 400
        assert error.message == "Validation failed"
        assert {detail["path"] for detail in error.details} == {"title", "body", "author"}
        assert posts.create.is_error
        assert not posts.create.is_pending

    async def test_failed_mutation_does_not_invalidate(self, posts):
        await posts.list.load()

        result = await posts.create.mutate({"title": "Hi"})

        assert result is None
        assert isinstance(posts.create.error, ApiError)
        assert not posts.list.is_stale

    async def test_query_error_is_recorded(self, posts):
        await close_database()

        data = await posts.list.load()

        assert data is None
        assert isinstance(posts.list.error, ApiError)
        assert posts.list.error.message == "Failed to fetch posts"
        assert not posts.list.is_loading

    async def test_refetch_bypasses_freshness(self, posts, posts_service, post_payload):
        await posts.list.load()
        await posts_service.create_post(PostCreate(**post_payload))

        assert await posts.list.load() == []
        assert len(await posts.list.refetch()) == 1


class TestUsersQueries:

    async def test_create_user_refreshes_list(self, users, user_payload):
        await users.list.load()

        await users.create.mutate_async(user_payload)

        assert users.list.is_stale
        assert [user["email"] for user in await users.list.load()] == ["jane@example.com"]

    async def test_users_and_posts_keys_are_separate(self, users, posts, cache, user_payload):
        await posts.list.load()

        await users.create.mutate(user_payload)

        assert cache.is_stale(USERS_KEY)
        assert not cache.is_stale(POSTS_KEY)


class TestMutationState:

    async def test_second_trigger_while_pending_is_rejected(self, cache):
        release = asyncio.Event()

        async def slow(payload):
            await release.wait()
            return payload

        mutation = Mutation(slow, cache)
        pending = asyncio.ensure_future(mutation.mutate_async("first"))
        await asyncio.sleep(0)

        assert mutation.is_pending
        with pytest.raises(MutationInProgressError):
            await mutation.mutate("second")

        release.set()
        assert await pending == "first"
        assert not mutation.is_pending
        assert mutation.is_success

    async def test_create_during_list_fetch_is_seen_by_next_read(self, cache):
        server = ["a"]
        release = asyncio.Event()
        started = asyncio.Event()

        async def fetch_list():
            snapshot = list(server)
            started.set()
            await release.wait()
            return snapshot

        async def create(item):
            server.append(item)
            return item

        query = Query(cache, "posts", fetch_list)
        mutation = Mutation(create, cache, invalidates=["posts"])

        loading = asyncio.ensure_future(query.load())
        await started.wait()
        await mutation.mutate_async("b")
        release.set()
        await loading

        assert query.is_stale
        assert "b" in await query.load()

    async def test_reset_clears_status(self, cache):
        async def failing(payload):
            raise ValueError("nope")

        mutation = Mutation(failing, cache)
        await mutation.mutate({})
        assert mutation.is_error

        mutation.reset()

        assert not mutation.is_error
        assert not mutation.is_success
        assert mutation.data is None

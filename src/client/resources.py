"""
Resource bindings: the posts and users queries and mutations
"""

from client.api_client import ApiClient
from client.queries import Mutation, Query
from client.query_cache import QueryCache

POSTS_KEY = "posts"
USERS_KEY = "users"


class PostsQueries:
    """Posts list query and create-post mutation sharing one cache"""

    def __init__(self, api: ApiClient, cache: QueryCache):
        self.list = Query(cache, POSTS_KEY, api.fetch_posts)
        self.create = Mutation(api.create_post, cache, invalidates=[POSTS_KEY])


class UsersQueries:
    """Users list query and create-user mutation sharing one cache"""

    def __init__(self, api: ApiClient, cache: QueryCache):
        self.list = Query(cache, USERS_KEY, api.fetch_users)
        self.create = Mutation(api.create_user, cache, invalidates=[USERS_KEY])

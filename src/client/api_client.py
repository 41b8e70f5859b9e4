"""
HTTP client for the posts and users API
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from config.settings import API_BASE_URL

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or []


class ApiClient:
    """Thin async wrapper over the REST endpoints"""

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url or API_BASE_URL)

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _request(self, method: str, path: str, default_error: str, json: Optional[Dict] = None) -> Any:
        response = await self.client.request(method, path, json=json)

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            body = data if isinstance(data, dict) else {}
            message = body.get("error") or default_error
            logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code, details=body.get("details"))

        return data

    async def fetch_posts(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/posts", "Failed to fetch posts")

    async def create_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/api/posts", "Failed to create post", json=post)

    async def fetch_users(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/users", "Failed to fetch users")

    async def create_user(self, user: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/api/users", "Failed to create user", json=user)

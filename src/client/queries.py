"""
Queries and mutations over the query cache
"""

import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from client.query_cache import Fetcher, QueryCache

logger = logging.getLogger(__name__)


class MutationInProgressError(RuntimeError):
    """Raised when a mutation is triggered while the same instance is pending"""


class Query:
    """Cached read of one resource, exposing data/loading/error state"""

    def __init__(self, cache: QueryCache, key: str, fetcher: Fetcher):
        self.cache = cache
        self.key = key
        self.fetcher = fetcher
        self.is_loading = False
        self.error: Optional[Exception] = None

    @property
    def data(self) -> Any:
        """Cached data, or None before the first successful fetch"""
        return self.cache.get_data(self.key)

    @property
    def is_stale(self) -> bool:
        return self.cache.is_stale(self.key)

    async def load(self) -> Any:
        """Read through the cache; refetches only when the data is stale"""
        return await self._run(force=False)

    async def refetch(self) -> Any:
        """Refetch regardless of freshness"""
        return await self._run(force=True)

    async def _run(self, force: bool) -> Any:
        self.is_loading = True
        try:
            data = await self.cache.fetch(self.key, self.fetcher, force=force)
            self.error = None
            return data
        except Exception as e:
            logger.error(f"Query '{self.key}' failed: {e}")
            self.error = e
            return self.data
        finally:
            self.is_loading = False


class Mutation:
    """Write operation that invalidates the cache keys it affects on success"""

    def __init__(
        self,
        mutation_fn: Callable[[Any], Awaitable[Any]],
        cache: QueryCache,
        invalidates: Iterable[str] = ()
    ):
        self.mutation_fn = mutation_fn
        self.cache = cache
        self.invalidates = list(invalidates)
        self.reset()

    def reset(self):
        """Clear mutation status"""
        self.is_pending = False
        self.is_success = False
        self.error: Optional[Exception] = None
        self.data: Any = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    async def mutate_async(self, payload: Any) -> Any:
        """Run the mutation, re-raising any failure"""
        if self.is_pending:
            raise MutationInProgressError("A mutation is already pending on this instance")

        self.is_pending = True
        self.is_success = False
        self.error = None
        try:
            result = await self.mutation_fn(payload)
        except Exception as e:
            logger.error(f"Mutation failed: {e}")
            self.error = e
            raise
        finally:
            self.is_pending = False

        self.data = result
        self.is_success = True
        for key in self.invalidates:
            self.cache.invalidate(key)
        return result

    async def mutate(self, payload: Any) -> Optional[Any]:
        """Run the mutation; failures are recorded on ``error`` instead of raised"""
        try:
            return await self.mutate_async(payload)
        except MutationInProgressError:
            raise
        except Exception:
            return None

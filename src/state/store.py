"""
Generic state container: a reducer, subscribers and an optional persistence boundary
"""

import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

from state.storage import LocalStorage

logger = logging.getLogger(__name__)

S = TypeVar("S")

Reducer = Callable[[S, Any], S]
Listener = Callable[[S, S], None]


class Store(Generic[S]):
    """
    Holds the current state snapshot and replaces it on every dispatch

    The reducer must be pure and return a new snapshot; the previous one is
    never mutated, so listeners receive (new_state, old_state).
    """

    def __init__(
        self,
        reducer: Reducer,
        initial_state: S,
        storage: Optional[LocalStorage] = None,
        storage_key: Optional[str] = None,
        serialize: Optional[Callable[[S], Any]] = None,
        deserialize: Optional[Callable[[Any, S], S]] = None
    ):
        self._reducer = reducer
        self._state = initial_state
        self._listeners: List[Listener] = []
        self._storage = storage
        self._storage_key = storage_key
        self._serialize = serialize
        self._deserialize = deserialize

    @property
    def state(self) -> S:
        return self._state

    @property
    def persistent(self) -> bool:
        return self._storage is not None and self._storage_key is not None

    def dispatch(self, action: Any) -> S:
        old_state = self._state
        new_state = self._reducer(old_state, action)
        if new_state is old_state:
            return new_state

        self._state = new_state
        if self.persistent and self._serialize is not None:
            self._storage.save(self._storage_key, self._serialize(new_state))
        for listener in list(self._listeners):
            listener(new_state, old_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def hydrate(self) -> S:
        """Merge the persisted subset into the current state"""
        if not self.persistent or self._deserialize is None:
            return self._state
        stored = self._storage.load(self._storage_key)
        if stored is None:
            return self._state
        self._state = self._deserialize(stored, self._state)
        logger.debug(f"Hydrated store from local storage key: {self._storage_key}")
        return self._state

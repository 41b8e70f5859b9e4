"""
Interface store: sidebar, modals, notifications and ad hoc loading flags
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from models.enums import NotificationSeverity
from state.storage import LocalStorage
from state.store import Store
from utils.helpers import utc_now

STORAGE_KEY = "ui-store"
DEFAULT_MODALS = ("settings", "help")


def _new_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class Notification:
    id: str
    severity: NotificationSeverity
    title: str
    message: str
    created_at: datetime


@dataclass(frozen=True)
class InterfaceState:
    sidebar_open: bool = False
    modals: Dict[str, bool] = field(default_factory=lambda: {name: False for name in DEFAULT_MODALS})
    notifications: Tuple[Notification, ...] = ()
    loading: Dict[str, bool] = field(default_factory=dict)

    def is_modal_open(self, name: str) -> bool:
        return self.modals.get(name, False)

    def is_loading(self, name: str) -> bool:
        return self.loading.get(name, False)


# Actions

@dataclass(frozen=True)
class ToggleSidebar:
    pass


@dataclass(frozen=True)
class SetSidebarOpen:
    open: bool


@dataclass(frozen=True)
class OpenModal:
    name: str


@dataclass(frozen=True)
class CloseModal:
    name: str


@dataclass(frozen=True)
class AddNotification:
    severity: NotificationSeverity
    title: str
    message: str = ""
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class RemoveNotification:
    id: str


@dataclass(frozen=True)
class ClearNotifications:
    pass


@dataclass(frozen=True)
class SetLoading:
    name: str
    loading: bool


def reduce_interface(state: InterfaceState, action: Any) -> InterfaceState:
    """Pure reducer: returns a new InterfaceState for ``action``"""
    if isinstance(action, ToggleSidebar):
        return replace(state, sidebar_open=not state.sidebar_open)

    if isinstance(action, SetSidebarOpen):
        return replace(state, sidebar_open=action.open)

    if isinstance(action, OpenModal):
        return replace(state, modals={**state.modals, action.name: True})

    if isinstance(action, CloseModal):
        return replace(state, modals={**state.modals, action.name: False})

    if isinstance(action, AddNotification):
        notification = Notification(
            id=action.id,
            severity=NotificationSeverity(action.severity),
            title=action.title,
            message=action.message,
            created_at=action.created_at,
        )
        return replace(state, notifications=state.notifications + (notification,))

    if isinstance(action, RemoveNotification):
        return replace(
            state,
            notifications=tuple(n for n in state.notifications if n.id != action.id)
        )

    if isinstance(action, ClearNotifications):
        return replace(state, notifications=())

    if isinstance(action, SetLoading):
        loading = dict(state.loading)
        if action.loading:
            loading[action.name] = True
        else:
            loading.pop(action.name, None)
        return replace(state, loading=loading)

    raise ValueError(f"Unknown interface action: {type(action).__name__}")


def serialize_interface(state: InterfaceState) -> Dict[str, Any]:
    """Persisted subset: only the sidebar flag"""
    return {"sidebarOpen": state.sidebar_open}


def deserialize_interface(data: Any, state: InterfaceState) -> InterfaceState:
    """Restore the persisted subset, ignoring missing or malformed fields"""
    if not isinstance(data, dict):
        return state
    sidebar_open = data.get("sidebarOpen")
    if isinstance(sidebar_open, bool):
        return replace(state, sidebar_open=sidebar_open)
    return state


def create_interface_store(storage: Optional[LocalStorage] = None) -> Store[InterfaceState]:
    """Build an interface store, hydrated from ``storage`` when given"""
    store = Store(
        reduce_interface,
        InterfaceState(),
        storage=storage,
        storage_key=STORAGE_KEY if storage is not None else None,
        serialize=serialize_interface,
        deserialize=deserialize_interface,
    )
    store.hydrate()
    return store

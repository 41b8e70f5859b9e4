"""
Interface store: reducer transitions, subscriptions and sidebar persistence
"""

import json

import pytest

from models.enums import NotificationSeverity
from state.interface_store import (
    STORAGE_KEY,
    AddNotification,
    ClearNotifications,
    CloseModal,
    InterfaceState,
    OpenModal,
    RemoveNotification,
    SetLoading,
    SetSidebarOpen,
    ToggleSidebar,
    create_interface_store,
    reduce_interface,
)
from state.storage import LocalStorage


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "local-storage.json"))


class TestInterfaceReducer:
    """Each action produces a new snapshot; the previous one is untouched"""

    def test_defaults(self):
        state = InterfaceState()

        assert state.sidebar_open is False
        assert state.modals == {"settings": False, "help": False}
        assert state.notifications == ()
        assert state.loading == {}

    def test_toggle_sidebar_twice_restores_value(self):
        initial = InterfaceState()

        toggled = reduce_interface(initial, ToggleSidebar())
        restored = reduce_interface(toggled, ToggleSidebar())

        assert toggled.sidebar_open is True
        assert restored.sidebar_open is False
        assert initial.sidebar_open is False

    def test_set_sidebar_open(self):
        assert reduce_interface(InterfaceState(), SetSidebarOpen(True)).sidebar_open is True

    def test_modals_open_and_close(self):
        opened = reduce_interface(InterfaceState(), OpenModal("settings"))
        closed = reduce_interface(opened, CloseModal("settings"))

        assert opened.is_modal_open("settings")
        assert not opened.is_modal_open("help")
        assert not closed.is_modal_open("settings")

    def test_notifications_append_in_order(self):
        state = reduce_interface(InterfaceState(), AddNotification(NotificationSeverity.SUCCESS, "Saved"))
        state = reduce_interface(state, AddNotification("error", "Failed", "Could not save"))

        assert [n.title for n in state.notifications] == ["Saved", "Failed"]
        assert state.notifications[1].severity is NotificationSeverity.ERROR
        assert state.notifications[1].message == "Could not save"
        assert state.notifications[0].id != state.notifications[1].id

    def test_remove_and_clear_notifications(self):
        state = reduce_interface(InterfaceState(), AddNotification("info", "One", id="n1"))
        state = reduce_interface(state, AddNotification("info", "Two", id="n2"))

        removed = reduce_interface(state, RemoveNotification("n1"))
        cleared = reduce_interface(state, ClearNotifications())

        assert [n.id for n in removed.notifications] == ["n2"]
        assert cleared.notifications == ()
        assert len(state.notifications) == 2

    def test_loading_flags(self):
        state = reduce_interface(InterfaceState(), SetLoading("posts", True))

        assert state.is_loading("posts")
        assert "posts" not in reduce_interface(state, SetLoading("posts", False)).loading

    def test_unknown_action_is_rejected(self):
        with pytest.raises(ValueError):
            reduce_interface(InterfaceState(), object())


class TestInterfaceStore:

    def test_listeners_receive_new_and_old_state(self):
        store = create_interface_store()
        seen = []
        store.subscribe(lambda new, old: seen.append((new.sidebar_open, old.sidebar_open)))

        store.dispatch(ToggleSidebar())

        assert seen == [(True, False)]

    def test_unsubscribe(self):
        store = create_interface_store()
        seen = []
        unsubscribe = store.subscribe(lambda new, old: seen.append(new))

        unsubscribe()
        store.dispatch(ToggleSidebar())

        assert seen == []

    def test_in_memory_store_is_not_persistent(self):
        assert not create_interface_store().persistent


class TestInterfacePersistence:

    def test_only_sidebar_flag_is_persisted(self, storage):
        store = create_interface_store(storage)

        store.dispatch(SetSidebarOpen(True))
        store.dispatch(OpenModal("help"))
        store.dispatch(AddNotification("info", "Hello"))

        assert storage.load(STORAGE_KEY) == {"sidebarOpen": True}

    def test_new_store_restores_sidebar(self, storage):
        create_interface_store(storage).dispatch(SetSidebarOpen(True))

        restored = create_interface_store(storage)

        assert restored.state.sidebar_open is True
        assert restored.state.modals == {"settings": False, "help": False}
        assert restored.state.notifications == ()

    def test_malformed_persisted_value_is_ignored(self, storage):
        storage.save(STORAGE_KEY, {"sidebarOpen": "yes"})

        assert create_interface_store(storage).state.sidebar_open is False

    def test_corrupt_storage_file_starts_fresh(self, tmp_path):
        path = tmp_path / "local-storage.json"
        path.write_text("{broken", encoding="utf-8")

        store = create_interface_store(LocalStorage(str(path)))
        store.dispatch(ToggleSidebar())

        assert store.state.sidebar_open is True
        assert json.loads(path.read_text(encoding="utf-8")) == {STORAGE_KEY: {"sidebarOpen": True}}

from flask import session

from falconids.app.common.admin_session import (
    AdminPanelSession,
    CookieSessionStore,
    MemorySessionStore,
    storage_key,
)


def test_storage_key():
    assert storage_key("abcde-fghij") == "admin_panel_session_abcde-fghij"


# PANEL-001: the panel flag is per principal
def test_memory_store_is_scoped_per_principal():
    store = MemorySessionStore()
    alice = AdminPanelSession(store, "alice")
    bob = AdminPanelSession(store, "bob")

    alice.set_logged_in()
    assert alice.is_logged_in
    assert not bob.is_logged_in

    alice.clear_logged_in()
    assert not alice.is_logged_in


def test_memory_store_clear_all():
    store = MemorySessionStore()
    store.set("a")
    store.set("b")
    store.clear_all()
    assert not store.get("a") and not store.get("b")


def test_no_principal_is_never_logged_in():
    store = MemorySessionStore()
    anonymous = AdminPanelSession(store, None)
    anonymous.set_logged_in()
    assert not anonymous.is_logged_in


def test_cookie_store_uses_flask_session(app):
    store = CookieSessionStore()
    with app.test_request_context("/"):
        store.set("alice")
        session["unrelated"] = 1
        assert session[storage_key("alice")] == "true"
        assert store.get("alice")
        assert not store.get("bob")

        store.clear_all()
        assert not store.get("alice")
        assert session["unrelated"] == 1

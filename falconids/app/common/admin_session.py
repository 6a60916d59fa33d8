"""Admin panel login marker, stored per principal.

Only a boolean is kept (never the password). The store is injected through
``app.extensions["admin_panel_sessions"]`` so it can live in the session
cookie, in memory, or anywhere else that can hold a flag per key.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from flask import Flask, current_app, session

STORAGE_KEY_PREFIX = "admin_panel_session_"


def storage_key(principal: str) -> str:
    return f"{STORAGE_KEY_PREFIX}{principal}"


class AdminPanelSessionStore(ABC):
    @abstractmethod
    def get(self, principal: str) -> bool: ...

    @abstractmethod
    def set(self, principal: str) -> None: ...

    @abstractmethod
    def clear(self, principal: str) -> None: ...

    @abstractmethod
    def clear_all(self) -> None: ...


class CookieSessionStore(AdminPanelSessionStore):
    """Keeps the flags in the signed Flask session of the current browser."""

    def get(self, principal: str) -> bool:
        if not principal:
            return False
        return session.get(storage_key(principal)) == "true"

    def set(self, principal: str) -> None:
        if principal:
            session[storage_key(principal)] = "true"

    def clear(self, principal: str) -> None:
        if principal:
            session.pop(storage_key(principal), None)

    def clear_all(self) -> None:
        for key in [k for k in session.keys() if k.startswith(STORAGE_KEY_PREFIX)]:
            session.pop(key, None)


class MemorySessionStore(AdminPanelSessionStore):
    def __init__(self) -> None:
        self._flags: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, principal: str) -> bool:
        if not principal:
            return False
        with self._lock:
            return self._flags.get(storage_key(principal)) == "true"

    def set(self, principal: str) -> None:
        if principal:
            with self._lock:
                self._flags[storage_key(principal)] = "true"

    def clear(self, principal: str) -> None:
        if principal:
            with self._lock:
                self._flags.pop(storage_key(principal), None)

    def clear_all(self) -> None:
        with self._lock:
            self._flags.clear()


class AdminPanelSession:
    """Admin panel login state for one principal."""

    def __init__(self, store: AdminPanelSessionStore, principal: Optional[str]):
        self.store = store
        self.principal = principal or ""

    @property
    def is_logged_in(self) -> bool:
        return bool(self.principal) and self.store.get(self.principal)

    def set_logged_in(self) -> None:
        self.store.set(self.principal)

    def clear_logged_in(self) -> None:
        self.store.clear(self.principal)


def init_admin_sessions(app: Flask, store: Optional[AdminPanelSessionStore] = None) -> None:
    if store is None:
        kind = app.config.get("ADMIN_PANEL_SESSION_STORE", "cookie")
        store = MemorySessionStore() if kind == "memory" else CookieSessionStore()
    app.extensions["admin_panel_sessions"] = store


def admin_panel_session(principal: Optional[str]) -> AdminPanelSession:
    return AdminPanelSession(current_app.extensions["admin_panel_sessions"], principal)

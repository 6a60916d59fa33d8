from __future__ import annotations

from typing import Callable, Optional

from flask import Flask, current_app, g

from falconids.app.backend.interface import Backend
from falconids.app.backend.local import LocalBackend
from falconids.app.common.identity import current_principal

BackendFactory = Callable[[Optional[str]], Backend]


def local_backend_factory(app: Flask) -> BackendFactory:
    def build(principal: Optional[str]) -> Backend:
        return LocalBackend(
            principal,
            bootstrap_admin=app.config.get("BOOTSTRAP_ADMIN_PRINCIPAL", ""),
            admin_panel_username=app.config.get("ADMIN_PANEL_USERNAME", ""),
            admin_panel_password_hash=app.config.get("ADMIN_PANEL_PASSWORD_HASH", ""),
        )

    return build


def init_backend(app: Flask, factory: Optional[BackendFactory] = None) -> None:
    app.extensions["backend_factory"] = factory or local_backend_factory(app)


def get_actor() -> Backend:
    """Backend handle for the current request's caller (built once per request)."""
    principal = current_principal()
    actor = g.get("actor")
    if actor is None or actor.caller != principal:
        actor = current_app.extensions["backend_factory"](principal)
        g.actor = actor
    return actor

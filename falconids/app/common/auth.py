"""Access gates for pages and API views.

Each gate is a decorator around one condition. API requests (``/api/...``)
get the JSON error shape; page requests get a rendered screen or a redirect.
Login state lives in the Flask session (see ``identity.py``).
"""

from functools import wraps
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import urlencode

from flask import current_app, flash, redirect, render_template, request

from falconids.app.backend.connection import get_actor
from falconids.app.common.admin_session import admin_panel_session
from falconids.app.common.error_formatting import format_error_message
from falconids.app.common.errors import abort_json, wants_json
from falconids.app.common.identity import current_principal
from falconids.app.queries.access import check_admin_access
from falconids.app.queries.bans import is_banned
from falconids.app.queries.profile import profile_gate
from falconids.app.routing import Route, path_for

F = TypeVar("F", bound=Callable[..., Any])

Check = Callable[[], Optional[Any]]


def _guard(check: Check) -> Callable[[F], F]:
    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            denied = check()
            if denied is not None:
                return denied
            return fn(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def _check_login() -> Optional[Any]:
    if current_principal():
        return None
    if wants_json():
        abort_json(401, "not_authenticated", "Authentication required")
    return render_template("gates/login_required.html", next=request.path), 401


def _check_not_banned() -> Optional[Any]:
    principal = current_principal()
    if not principal:
        return None
    result = is_banned(get_actor(), principal)
    if result.data is not True:
        return None
    if wants_json():
        abort_json(403, "banned", "Your account has been banned")
    return render_template("gates/banned.html", principal=principal), 403


def _check_admin_role() -> Optional[Any]:
    denied = _check_login()
    if denied is not None:
        return denied
    access = check_admin_access(get_actor())
    if access.error is not None:
        message = format_error_message(access.error)
        current_app.logger.warning("admin check failed: %s", message)
        if wants_json():
            abort_json(503, "admin_check_failed", "Unable to verify admin access", {"reason": message})
        return render_template("gates/admin_check_failed.html", message=message, retry_url=request.full_path), 503
    if not access.is_admin:
        if wants_json():
            abort_json(403, "not_authorized", "Admin access required")
        return render_template("gates/admin_denied.html"), 403
    return None


def _check_admin_panel() -> Optional[Any]:
    denied = _check_login()
    if denied is not None:
        return denied
    if admin_panel_session(current_principal()).is_logged_in:
        return None
    if wants_json():
        abort_json(401, "admin_panel_login_required", "Admin panel login required")
    return redirect(f"{path_for(Route.admin_login)}?{urlencode({'next': request.path})}")


def _check_profile() -> Optional[Any]:
    gate = profile_gate(get_actor())
    if not gate.must_setup_profile:
        return None
    if wants_json():
        abort_json(409, "profile_required", "Complete your profile first")
    flash("Please complete your profile to continue.", "info")
    return redirect(path_for(Route.profile))


def _check_admin_area() -> Optional[Any]:
    mode = current_app.config.get("ADMIN_GATE", "role")
    checks = {
        "role": (_check_admin_role,),
        "panel": (_check_admin_panel,),
        "both": (_check_admin_role, _check_admin_panel),
    }.get(mode, (_check_admin_role,))
    for check in checks:
        denied = check()
        if denied is not None:
            return denied
    return None


login_required = _guard(_check_login)
not_banned = _guard(_check_not_banned)
admin_required = _guard(_check_admin_role)
admin_panel_required = _guard(_check_admin_panel)
profile_required = _guard(_check_profile)
admin_area_required = _guard(_check_admin_area)

from __future__ import annotations

import logging

from flask import Blueprint, current_app

from falconids.app.backend.connection import get_actor
from falconids.app.common.admin_session import admin_panel_session
from falconids.app.common.auth import login_required
from falconids.app.common.errors import abort_json
from falconids.app.common.identity import (
    authenticate,
    create_account,
    current_principal,
    sign_in,
    sign_out,
)
from falconids.app.common.validation import get_json, is_valid_email, require_fields
from falconids.app.models import Account
from falconids.app.backend.types import UserRole
from falconids.app.queries.access import bootstrap_admin, caller_role, check_admin_access, ensure_user_role, forget_caller
from falconids.app.queries.profile import caller_profile

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)


def start_session(account: Account) -> str:
    """Sign `account` in and run the once-per-login role setup."""
    principal = sign_in(account)
    actor = get_actor()
    ensure_user_role(actor)
    bootstrap_admin(actor, current_app.config.get("BOOTSTRAP_ADMIN_PRINCIPAL", ""))
    logger.info("login %s", principal)
    return principal


def end_session() -> None:
    principal = current_principal()
    if principal:
        admin_panel_session(principal).clear_logged_in()
        forget_caller(principal)
    sign_out()


@bp.post("/users")
def create_user():
    """POST /api/users - Create an account and sign in."""
    data = get_json()
    require_fields(data, ["email", "password"])

    email = str(data["email"]).strip().lower()
    password = str(data["password"])
    if not is_valid_email(email):
        abort_json(400, "validation_error", "Please enter a valid email address", {"fields": {"email": "Please enter a valid email address"}})
    if not password:
        abort_json(400, "validation_error", "Password is required", {"fields": {"password": "Password is required"}})
    if Account.query.filter_by(email=email).first():
        abort_json(409, "conflict", "Email already registered")

    account = create_account(email, password)
    principal = start_session(account)
    return {"email": account.email, "principal": principal}, 201


@bp.post("/auth/login")
def login():
    """POST /api/auth/login - Authenticate and start a session."""
    data = get_json()
    require_fields(data, ["email", "password"])

    account = authenticate(str(data["email"]), str(data["password"]))
    if not account:
        abort_json(401, "not_authenticated", "Invalid email or password")

    principal = start_session(account)
    return {"message": "logged_in", "principal": principal}, 200


@bp.post("/auth/logout")
def logout():
    """POST /api/auth/logout - Terminate session."""
    end_session()
    return {"message": "logged_out"}, 200


@bp.get("/users/me")
@login_required
def me():
    """GET /api/users/me - Current principal, role and profile."""
    actor = get_actor()
    profile = caller_profile(actor).data
    return {
        "principal": actor.caller,
        "role": (caller_role(actor).data or UserRole.guest).value,
        "is_admin": check_admin_access(actor).is_admin,
        "admin_panel": admin_panel_session(actor.caller).is_logged_in,
        "profile": None if profile is None else {"name": profile.name, "email": profile.email, "phone": profile.phone},
    }, 200

"""Role checks and role-changing calls made on behalf of the logged-in caller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from falconids.app.backend.interface import Backend, BackendTrap
from falconids.app.backend.types import UserRole
from falconids.app.common.error_formatting import extract_backend_error, format_error_message, is_unauthorized
from falconids.app.queries.client import QueryResult, RetryPolicy, capped_exponential, fixed_delay, get_query_client
from falconids.app.queries.profile import CURRENT_USER_PROFILE, IS_ADMIN

logger = logging.getLogger(__name__)

CALLER_ROLE = ("callerRole",)
ADMIN_INVITATION = ("adminInvitation",)

# Messages assign_admin_role_to_caller raises for callers that are simply
# not the bootstrap admin.
_EXPECTED_BOOTSTRAP_REJECTIONS = (
    "Bootstrap admin has already been assigned",
    "Caller is already an admin",
    "Unauthorized",
)


@dataclass
class AdminAccess:
    is_admin: bool
    is_loading: bool
    is_fetched: bool
    error: Optional[BaseException] = None


def admin_check_retry() -> RetryPolicy:
    cfg = current_app.config
    return RetryPolicy(
        max_attempts=int(cfg.get("ADMIN_CHECK_RETRIES", 2)) + 1,
        wait=fixed_delay(float(cfg.get("ADMIN_CHECK_RETRY_DELAY", 0.5))),
    )


def check_admin_access(actor: Optional[Backend], retry: Optional[RetryPolicy] = None) -> AdminAccess:
    """Ask the backend whether the caller is an admin.

    A rejection mentioning "Unauthorized" means "not an admin" and is not
    reported as an error; anything else is retried per `retry` and then
    surfaced on `error`.
    """
    caller = actor.caller if actor else None

    def fetch() -> bool:
        try:
            return bool(actor.is_caller_admin())
        except BackendTrap as exc:
            if is_unauthorized(exc):
                return False
            raise

    result = get_query_client().query(
        IS_ADMIN + (caller,),
        fetch,
        enabled=caller is not None,
        retry=retry or admin_check_retry(),
        stale_after=0,
    )
    return AdminAccess(
        is_admin=result.data is True,
        is_loading=result.is_loading,
        is_fetched=result.is_fetched,
        error=result.error,
    )


def caller_role(actor: Optional[Backend]):
    caller = actor.caller if actor else None
    return get_query_client().query(
        CALLER_ROLE + (caller,),
        lambda: actor.get_caller_user_role(),
        enabled=caller is not None,
    )


def _refresh_role_views() -> None:
    client = get_query_client()
    for prefix in (IS_ADMIN, CURRENT_USER_PROFILE, CALLER_ROLE):
        client.invalidate(prefix)


def ensure_user_role(actor: Backend) -> None:
    """Give a freshly logged-in caller the user role and drop stale role views."""
    actor.ensure_user_role()
    _refresh_role_views()


def bootstrap_admin(actor: Backend, bootstrap_principal: str) -> bool:
    """Claim the admin role when the caller is the configured bootstrap principal.

    Returns True when the role was assigned. Expected rejections are logged
    and swallowed so ordinary logins never see them.
    """
    if not bootstrap_principal or actor.caller != bootstrap_principal:
        return False
    try:
        actor.assign_admin_role_to_caller()
    except BackendTrap as exc:
        message = format_error_message(exc)
        if not any(m in message for m in _EXPECTED_BOOTSTRAP_REJECTIONS):
            raise
        logger.info("admin bootstrap skipped for %s: %s", actor.caller, message)
        if "already an admin" in message:
            _refresh_role_views()
        return False
    logger.info("admin bootstrap succeeded for %s", actor.caller)
    _refresh_role_views()
    return confirm_admin(actor)


def confirm_admin(actor: Backend, retry: Optional[RetryPolicy] = None) -> bool:
    """Wait until a freshly assigned admin role is visible to the admin check."""

    def fetch() -> bool:
        if not actor.is_caller_admin():
            raise BackendTrap("Admin role not visible yet")
        return True

    policy = retry or RetryPolicy(max_attempts=3, wait=capped_exponential())
    try:
        return policy.retrying()(fetch)
    except BackendTrap as exc:
        logger.warning("admin role for %s not confirmed: %s", actor.caller, format_error_message(exc))
        return False


def restore_admin(actor: Backend) -> None:
    get_query_client().mutate(
        actor.assign_admin_role_to_caller, invalidates=(IS_ADMIN, CURRENT_USER_PROFILE, CALLER_ROLE)
    )


def assign_role(actor: Backend, principal: str, role: UserRole) -> None:
    get_query_client().mutate(
        actor.assign_caller_user_role, principal, role, invalidates=(IS_ADMIN, CURRENT_USER_PROFILE, CALLER_ROLE)
    )


def forget_caller(principal: Optional[str]) -> None:
    """Drop every cached view scoped to `principal` (used on logout)."""
    if principal is not None:
        get_query_client().invalidate_where(lambda key: principal in key)


def admin_invitation_retry() -> RetryPolicy:
    cfg = current_app.config
    return RetryPolicy(
        max_attempts=int(cfg.get("ADMIN_INVITATION_RETRIES", 3)) + 1,
        wait=capped_exponential(
            float(cfg.get("ADMIN_INVITATION_RETRY_BASE", 1.0)),
            float(cfg.get("ADMIN_INVITATION_RETRY_CAP", 3.0)),
        ),
    )


def admin_invitation(actor: Optional[Backend], retry: Optional[RetryPolicy] = None) -> QueryResult:
    """Whether the caller has a pending admin invitation.

    "Only authenticated users" rejections come from a caller whose role is
    not set up yet, so they are retried. Other Unauthorized or trap
    rejections mean "no invitation".
    """
    caller = actor.caller if actor else None

    def fetch() -> bool:
        try:
            return bool(actor.check_admin_invitation())
        except BackendTrap as exc:
            if "Only authenticated users" in format_error_message(exc):
                raise
            if extract_backend_error(exc) is not None:
                return False
            raise

    return get_query_client().query(
        ADMIN_INVITATION + (caller,),
        fetch,
        enabled=caller is not None,
        retry=retry or admin_invitation_retry(),
        stale_after=0,
    )


def invite_admin(actor: Backend, principal: str) -> None:
    get_query_client().mutate(actor.invite_admin, principal, invalidates=(ADMIN_INVITATION,))


def accept_admin_invitation(actor: Backend) -> None:
    get_query_client().mutate(
        actor.accept_admin_invitation,
        invalidates=(ADMIN_INVITATION, IS_ADMIN, CURRENT_USER_PROFILE, CALLER_ROLE),
    )


def decline_admin_invitation(actor: Backend) -> None:
    get_query_client().mutate(actor.decline_admin_invitation, invalidates=(ADMIN_INVITATION,))

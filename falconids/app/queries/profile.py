from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from falconids.app.backend.interface import Backend
from falconids.app.backend.types import UserProfile
from falconids.app.queries.client import QueryResult, get_query_client

CURRENT_USER_PROFILE = ("currentUserProfile",)
IS_ADMIN = ("isAdmin",)


def caller_profile(actor: Optional[Backend]) -> QueryResult:
    caller = actor.caller if actor else None
    return get_query_client().query(
        CURRENT_USER_PROFILE + (caller,),
        lambda: actor.get_caller_user_profile(),
        enabled=caller is not None,
    )


def save_caller_profile(actor: Backend, profile: UserProfile) -> None:
    # Saving a profile can be what creates the caller's role, so the admin
    # check is refreshed too.
    get_query_client().mutate(
        actor.save_caller_user_profile, profile, invalidates=(CURRENT_USER_PROFILE, IS_ADMIN)
    )


@dataclass
class ProfileGate:
    is_checking_profile: bool
    must_setup_profile: bool
    is_authenticated: bool


def profile_gate(actor: Optional[Backend]) -> ProfileGate:
    """Whether an authenticated caller still has to fill in their profile."""
    is_authenticated = actor is not None and actor.caller is not None
    result = caller_profile(actor)
    return ProfileGate(
        is_checking_profile=is_authenticated and result.is_loading,
        must_setup_profile=is_authenticated and result.is_success and result.data is None,
        is_authenticated=is_authenticated,
    )

from __future__ import annotations

from typing import Optional

from falconids.app.backend.interface import Backend
from falconids.app.queries.client import QueryResult, get_query_client

BANNED_USERS = ("bannedUsers",)
IS_BANNED = ("isBanned",)


def banned_users(actor: Optional[Backend], is_admin: bool) -> QueryResult:
    return get_query_client().query(
        BANNED_USERS,
        lambda: actor.get_banned_users(),
        enabled=actor is not None and is_admin,
    )


def is_banned(actor: Optional[Backend], principal: Optional[str]) -> QueryResult:
    caller = actor.caller if actor else None
    return get_query_client().query(
        IS_BANNED + (principal, caller),
        lambda: actor.is_banned_user(principal),
        enabled=caller is not None and bool(principal),
    )


def ban_user(actor: Backend, principal: str) -> None:
    get_query_client().mutate(actor.ban_user, principal, invalidates=(BANNED_USERS, IS_BANNED))


def unban_user(actor: Backend, principal: str) -> None:
    get_query_client().mutate(actor.unban_user, principal, invalidates=(BANNED_USERS, IS_BANNED))

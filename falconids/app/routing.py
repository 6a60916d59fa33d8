"""Map a location (``#/admin/orders/42``, ``/prices``, ...) to a page route.

The set of routes is closed; anything that does not match falls back to
``home``. Identifiers are the trailing path segment of the prefix routes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Route(str, Enum):
    home = "home"
    order = "order"
    prices = "prices"
    order_confirmation = "order-confirmation"
    my_orders = "my-orders"
    admin = "admin"
    admin_order_details = "admin-order-details"
    admin_users = "admin-users"
    admin_login = "admin-login"
    profile = "profile"


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    identifier: str = ""


EXACT = {
    "/order": Route.order,
    "/prices": Route.prices,
    "/my-orders": Route.my_orders,
    "/admin": Route.admin,
    "/admin/users": Route.admin_users,
    "/admin/login": Route.admin_login,
    "/profile": Route.profile,
}

# (prefix, route, index of the identifier in path.split("/"))
# Longer prefixes first.
PREFIXES = (
    ("/admin/orders/", Route.admin_order_details, 3),
    ("/confirmation/", Route.order_confirmation, 2),
    ("/my-orders/", Route.my_orders, 2),
)

PATHS = {route: path for path, route in EXACT.items()}
PATHS[Route.home] = "/"


def _normalize(location: str) -> str:
    path = (location or "").strip()
    if path.startswith("#"):
        path = path[1:]
    if not path.startswith("/"):
        path = "/" + path
    return path


def parse_location(location: str) -> RouteMatch:
    path = _normalize(location)

    for prefix, route, index in PREFIXES:
        if path.startswith(prefix):
            parts = path.split("/")
            return RouteMatch(route, parts[index] if len(parts) > index else "")

    route = EXACT.get(path)
    if route is not None:
        return RouteMatch(route)
    return RouteMatch(Route.home)


def path_for(route: Route, identifier: str = "") -> str:
    if route == Route.admin_order_details:
        return f"/admin/orders/{identifier}"
    if route == Route.order_confirmation:
        return f"/confirmation/{identifier}"
    if route == Route.my_orders and identifier:
        return f"/my-orders/{identifier}"
    return PATHS[route]

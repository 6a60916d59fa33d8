import pytest

from falconids.app.routing import Route, RouteMatch, parse_location, path_for


# ROUTE-001: admin order details carries the order id
def test_admin_order_details_from_hash():
    assert parse_location("#/admin/orders/42") == RouteMatch(Route.admin_order_details, "42")


@pytest.mark.parametrize(
    "location, expected",
    [
        ("#/confirmation/7", RouteMatch(Route.order_confirmation, "7")),
        ("/my-orders/3", RouteMatch(Route.my_orders, "3")),
        ("#/my-orders", RouteMatch(Route.my_orders)),
        ("order", RouteMatch(Route.order)),
        ("#/prices", RouteMatch(Route.prices)),
        ("/admin", RouteMatch(Route.admin)),
        ("/admin/users", RouteMatch(Route.admin_users)),
        ("/admin/login", RouteMatch(Route.admin_login)),
        ("/profile", RouteMatch(Route.profile)),
    ],
)
def test_known_locations(location, expected):
    assert parse_location(location) == expected


# ROUTE-002: anything unmatched falls back to home
@pytest.mark.parametrize("location", ["", "#", "#/", "#/nowhere", "/orders/1", "/admin/orderz"])
def test_unmatched_goes_home(location):
    assert parse_location(location) == RouteMatch(Route.home, "")


def test_path_for_builds_links():
    assert path_for(Route.admin_order_details, "42") == "/admin/orders/42"
    assert path_for(Route.order_confirmation, "9") == "/confirmation/9"
    assert path_for(Route.my_orders) == "/my-orders"
    assert path_for(Route.home) == "/"
    assert parse_location(path_for(Route.my_orders, "5")) == RouteMatch(Route.my_orders, "5")

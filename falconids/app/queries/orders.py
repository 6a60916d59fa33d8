from __future__ import annotations

from typing import Optional

from falconids.app.backend.interface import Backend
from falconids.app.backend.types import (
    IDInformation,
    OrderStatus,
    PaymentContactStatus,
    ShippingAddress,
)
from falconids.app.queries.client import QueryResult, get_query_client

ORDERS = ("orders",)
MY_ORDERS = ("myOrders",)
ORDER = ("order",)
ORDER_STATUS = ("orderStatus",)

# Every write to an order touches all of its cached views.
ORDER_VIEWS = (ORDERS, ORDER, MY_ORDERS, ORDER_STATUS)


def all_orders(actor: Optional[Backend], is_admin: bool) -> QueryResult:
    return get_query_client().query(
        ORDERS,
        lambda: actor.get_all_orders(),
        enabled=actor is not None and is_admin,
    )


def my_orders(actor: Optional[Backend]) -> QueryResult:
    caller = actor.caller if actor else None
    return get_query_client().query(
        MY_ORDERS + (caller,),
        lambda: actor.get_my_orders(),
        enabled=caller is not None,
    )


def order_detail(actor: Optional[Backend], order_id: Optional[int]) -> QueryResult:
    caller = actor.caller if actor else None
    return get_query_client().query(
        ORDER + (str(order_id), caller),
        lambda: actor.get_order(order_id),
        enabled=caller is not None and order_id is not None,
    )


def order_status(actor: Optional[Backend], order_id: Optional[int]) -> QueryResult:
    return get_query_client().query(
        ORDER_STATUS + (str(order_id),),
        lambda: actor.get_order_status(order_id),
        enabled=actor is not None and order_id is not None,
    )


def submit_order(
    actor: Backend,
    customer_name: str,
    email: str,
    phone: str,
    shipping_address: ShippingAddress,
    id_info: IDInformation,
) -> int:
    if actor is None or actor.caller is None:
        raise PermissionError("You must be logged in to place an order. Please log in and try again.")
    return get_query_client().mutate(
        actor.submit_order,
        customer_name,
        email,
        phone,
        shipping_address,
        id_info,
        invalidates=(ORDERS, MY_ORDERS),
    )


def update_order_status(actor: Backend, order_id: int, status: OrderStatus) -> None:
    get_query_client().mutate(actor.update_order_status, order_id, status, invalidates=ORDER_VIEWS)


def update_payment_contact_status(actor: Backend, order_id: int, status: PaymentContactStatus, notes: str) -> None:
    get_query_client().mutate(
        actor.update_payment_contact_status, order_id, status, notes, invalidates=ORDER_VIEWS
    )


def update_order(
    actor: Backend,
    order_id: int,
    customer_name: str,
    email: str,
    phone: str,
    shipping_address: ShippingAddress,
) -> None:
    get_query_client().mutate(
        actor.update_order, order_id, customer_name, email, phone, shipping_address, invalidates=ORDER_VIEWS
    )


def delete_order(actor: Backend, order_id: int) -> None:
    get_query_client().mutate(actor.delete_order, order_id, invalidates=ORDER_VIEWS)


def set_tracking_number(actor: Backend, order_id: int, tracking_number: str) -> None:
    get_query_client().mutate(
        actor.add_or_update_tracking_number, order_id, tracking_number, invalidates=ORDER_VIEWS
    )

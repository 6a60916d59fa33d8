"""Filtering and summaries for the admin orders and users screens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

from falconids.app.backend.types import Order, OrderStatus

ALL = "all"


def filter_orders(orders: Iterable[Order], status: str = ALL, payment: str = ALL, search: str = "") -> List[Order]:
    """Apply the dashboard filters and sort newest first.

    `search` matches customer name or email (case-insensitive) or any part
    of the order id.
    """
    result = list(orders)
    if status and status != ALL:
        result = [o for o in result if o.status.value == status]
    if payment and payment != ALL:
        result = [o for o in result if o.payment_contact_status.value == payment]
    query = (search or "").strip().lower()
    if query:
        result = [
            o
            for o in result
            if query in o.customer_name.lower() or query in o.email.lower() or query in str(o.id)
        ]
    result.sort(key=lambda o: o.created_time, reverse=True)
    return result


def order_stats(orders: Iterable[Order]) -> Dict[str, int]:
    orders = list(orders)
    return {
        "total": len(orders),
        "pending": sum(1 for o in orders if o.status == OrderStatus.pending),
        "shipped": sum(1 for o in orders if o.status == OrderStatus.shipped),
    }


@dataclass
class KnownUser:
    principal: str
    customer_name: str
    email: str
    banned: bool


def known_users(orders: Iterable[Order], banned: Iterable[str]) -> List[KnownUser]:
    """One entry per order owner, using the details of their first order seen."""
    banned_set = set(banned)
    seen: Dict[str, KnownUser] = {}
    for order in orders:
        if order.owner not in seen:
            seen[order.owner] = KnownUser(order.owner, order.customer_name, order.email, order.owner in banned_set)
    return list(seen.values())

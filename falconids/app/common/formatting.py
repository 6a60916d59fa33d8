from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from falconids.app.backend.types import Order, OrderStatus, PaymentContactStatus

ORDER_STATUS_LABELS = {
    OrderStatus.pending: "Pending",
    OrderStatus.shipped: "Shipped",
}

PAYMENT_CONTACT_LABELS = {
    PaymentContactStatus.notContacted: "Not Contacted",
    PaymentContactStatus.contacted: "Contacted",
    PaymentContactStatus.paymentReceived: "Payment Received",
}


def format_order_date(time_ns: int) -> str:
    """Backend times are nanoseconds since the epoch."""
    moment = datetime.fromtimestamp(time_ns // 1_000_000_000, tz=timezone.utc)
    return moment.strftime("%B %d, %Y, %I:%M %p UTC")


def format_order_status(status: Any) -> str:
    try:
        return ORDER_STATUS_LABELS[OrderStatus(status)]
    except ValueError:
        return "Unknown"


def format_payment_contact_status(status: Any) -> str:
    try:
        return PAYMENT_CONTACT_LABELS[PaymentContactStatus(status)]
    except ValueError:
        return "Unknown"


def pricing_tiers(price_cents: int) -> List[Dict[str, Any]]:
    """Quantity tiers shown on the prices page. Every ID includes 2 copies."""
    return [
        {
            "quantity": qty,
            "price_cents": price_cents,
            "total_cents": qty * price_cents,
            "copies": qty * 2,
            "popular": qty == 3,
        }
        for qty in range(1, 6)
    ]


def dollars(cents: int) -> str:
    return f"${cents / 100:,.0f}" if cents % 100 == 0 else f"${cents / 100:,.2f}"


def order_to_dict(order: Order, include_id_info: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": order.id,
        "owner": order.owner,
        "customer_name": order.customer_name,
        "email": order.email,
        "phone": order.phone,
        "shipping_address": {
            "street": order.shipping_address.street,
            "city": order.shipping_address.city,
            "state": order.shipping_address.state,
            "zip": order.shipping_address.zip,
        },
        "status": order.status.value,
        "payment_contact_status": order.payment_contact_status.value,
        "contact_notes": order.contact_notes,
        "tracking_number": order.tracking_number,
        "created_time": order.created_time,
        "created_at": format_order_date(order.created_time),
    }
    if include_id_info:
        info = order.id_info
        data["id_info"] = {
            "name": info.name,
            "date_of_birth": info.date_of_birth,
            "sex": info.sex,
            "height": info.height,
            "weight": info.weight,
            "hair_color": info.hair_color,
            "eye_color": info.eye_color,
            "address": {
                "street": info.address.street,
                "city": info.address.city,
                "state": info.address.state,
                "zip": info.address.zip,
            },
            "photo_url": info.photo.get_direct_url() if info.photo else None,
            "signature_url": info.signature.get_direct_url() if info.signature else None,
        }
    return data

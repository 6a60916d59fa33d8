import pytest

from falconids.app.backend.types import (
    ExternalBlob,
    IDInformation,
    Order,
    OrderStatus,
    PaymentContactStatus,
    ShippingAddress,
)
from falconids.app.common.formatting import (
    dollars,
    format_order_date,
    format_order_status,
    format_payment_contact_status,
    pricing_tiers,
)
from falconids.modules.admin.dashboard import filter_orders, known_users, order_stats


def make_order(order_id, owner="owner1", name="Jane Doe", email="jane@example.com", created=0, status=OrderStatus.pending,
               payment=PaymentContactStatus.notContacted):
    address = ShippingAddress(street="1 Main St", city="Salem", state="OR", zip="97301")
    return Order(
        id=order_id,
        owner=owner,
        customer_name=name,
        email=email,
        phone="5551234567",
        shipping_address=address,
        id_info=IDInformation("Jane", "1990-01-01", "F", "5'6\"", "", "Brown", "Green", address),
        status=status,
        payment_contact_status=payment,
        created_time=created,
    )


def test_status_labels():
    assert format_order_status(OrderStatus.shipped) == "Shipped"
    assert format_order_status("pending") == "Pending"
    assert format_payment_contact_status("notContacted") == "Not Contacted"
    assert format_payment_contact_status(PaymentContactStatus.paymentReceived) == "Payment Received"
    assert format_payment_contact_status("bogus") == "Unknown"


def test_format_order_date_from_nanoseconds():
    assert format_order_date(0) == "January 01, 1970, 12:00 AM UTC"
    assert format_order_date(86_400 * 1_000_000_000) == "January 02, 1970, 12:00 AM UTC"


# PRICE-001: 1-5 IDs, two copies each, three is the popular tier
def test_pricing_tiers():
    tiers = pricing_tiers(10000)
    assert [t["quantity"] for t in tiers] == [1, 2, 3, 4, 5]
    assert tiers[4]["total_cents"] == 50000
    assert tiers[4]["copies"] == 10
    assert [t["popular"] for t in tiers] == [False, False, True, False, False]
    assert dollars(10000) == "$100"
    assert dollars(12345) == "$123.45"


def test_external_blob():
    blob = ExternalBlob.from_bytes(b"hi", content_type="image/png")
    assert blob.get_bytes() == b"hi"
    assert blob.get_direct_url() == "data:image/png;base64,aGk="

    remote = ExternalBlob.from_url("/blobs/1")
    assert remote.get_direct_url() == "/blobs/1"
    with pytest.raises(ValueError):
        remote.get_bytes()
    assert ExternalBlob.from_url("/blobs/2", loader=lambda: b"x").get_bytes() == b"x"


# ADMIN-001: dashboard filters and ordering
def test_filter_orders():
    orders = [
        make_order(1, name="Alice", email="alice@a.io", created=1),
        make_order(2, name="Bob", email="bob@b.io", created=3, status=OrderStatus.shipped),
        make_order(13, name="Carol", email="carol@c.io", created=2, payment=PaymentContactStatus.contacted),
    ]
    assert [o.id for o in filter_orders(orders)] == [2, 13, 1]
    assert [o.id for o in filter_orders(orders, status="shipped")] == [2]
    assert [o.id for o in filter_orders(orders, payment="contacted")] == [13]
    assert [o.id for o in filter_orders(orders, search="ALICE")] == [1]
    assert [o.id for o in filter_orders(orders, search="b.io")] == [2]
    assert [o.id for o in filter_orders(orders, search="1")] == [13, 1]
    assert order_stats(orders) == {"total": 3, "pending": 2, "shipped": 1}


def test_known_users_dedupes_owners():
    orders = [make_order(1, owner="p1", name="First"), make_order(2, owner="p1", name="Second"), make_order(3, owner="p2")]
    users = known_users(orders, banned=["p2"])
    assert [(u.principal, u.customer_name, u.banned) for u in users] == [("p1", "First", False), ("p2", "Jane Doe", True)]

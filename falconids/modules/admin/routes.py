from __future__ import annotations

import logging
from typing import List

from flask import Blueprint, current_app, request

from falconids.app.backend.connection import get_actor
from falconids.app.backend.types import Order, OrderStatus, PaymentContactStatus, ShippingAddress, UserRole
from falconids.app.common.admin_session import admin_panel_session
from falconids.app.common.auth import admin_area_required, admin_required, login_required, not_banned
from falconids.app.common.error_formatting import format_error_message
from falconids.app.common.errors import abort_json
from falconids.app.common.formatting import order_to_dict
from falconids.app.common.forms import validate_order_edit, validate_principal_input
from falconids.app.common.validation import abort_if_errors, get_json, require_fields, text
from falconids.app.queries import access as access_queries
from falconids.app.queries import bans as ban_queries
from falconids.app.queries import orders as order_queries
from falconids.app.queries.access import assign_role, check_admin_access, restore_admin
from falconids.modules.admin.dashboard import filter_orders, known_users, order_stats

logger = logging.getLogger(__name__)

bp = Blueprint("admin", __name__)


def _enum_value(enum_cls, raw: str, field: str):
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = [e.value for e in enum_cls]
        abort_json(400, "validation_error", f"Invalid {field}", {"fields": {field: f"Must be one of {allowed}"}})


def _order_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        abort_json(404, "not_found", "Order not found")


def load_all_orders() -> List[Order]:
    """Every order, for callers the backend recognises as admins."""
    actor = get_actor()
    access = check_admin_access(actor)
    if access.error is not None:
        raise access.error
    if not access.is_admin:
        abort_json(403, "not_authorized", "Admin role required")
    result = order_queries.all_orders(actor, access.is_admin)
    if result.error is not None:
        raise result.error
    return result.data or []


def load_banned() -> List[str]:
    actor = get_actor()
    result = ban_queries.banned_users(actor, check_admin_access(actor).is_admin)
    if result.error is not None:
        raise result.error
    return result.data or []


# --- access ---
@bp.get("/admin/access")
@login_required
def access():
    actor = get_actor()
    result = check_admin_access(actor)
    return {
        "is_admin": result.is_admin,
        "is_fetched": result.is_fetched,
        "error": format_error_message(result.error) if result.error is not None else None,
        "admin_panel": admin_panel_session(actor.caller).is_logged_in,
        "gate": current_app.config.get("ADMIN_GATE", "role"),
    }, 200


@bp.post("/admin/panel/login")
@login_required
def panel_login():
    data = get_json()
    require_fields(data, ["username", "password"])
    actor = get_actor()
    if not actor.admin_login(text(data, "username"), text(data, "password")):
        logger.warning("admin panel login failed for %s", actor.caller)
        abort_json(401, "invalid_credentials", "Invalid username or password")
    admin_panel_session(actor.caller).set_logged_in()
    return {"message": "admin_panel_logged_in"}, 200


@bp.post("/admin/panel/logout")
@login_required
def panel_logout():
    admin_panel_session(get_actor().caller).clear_logged_in()
    return {"message": "admin_panel_logged_out"}, 200


@bp.post("/admin/restore")
@login_required
def restore():
    """Claim the admin role again (bootstrap principal only)."""
    restore_admin(get_actor())
    return {"is_admin": check_admin_access(get_actor()).is_admin}, 200


@bp.post("/admin/roles")
@admin_required
def set_role():
    data = get_json()
    require_fields(data, ["principal", "role"])
    role = _enum_value(UserRole, text(data, "role"), "role")
    assign_role(get_actor(), text(data, "principal").strip(), role)
    return {"principal": data["principal"], "role": role.value}, 200


# --- orders ---
@bp.get("/admin/orders")
@admin_area_required
def list_orders():
    orders = load_all_orders()
    filtered = filter_orders(
        orders,
        status=request.args.get("status", "all"),
        payment=request.args.get("payment", "all"),
        search=request.args.get("search", ""),
    )
    return {"items": [order_to_dict(o) for o in filtered], "stats": order_stats(orders)}, 200


@bp.get("/admin/orders/<order_id>")
@admin_area_required
def get_order(order_id: str):
    result = order_queries.order_detail(get_actor(), _order_id(order_id))
    if result.error is not None:
        raise result.error
    if result.data is None:
        abort_json(404, "not_found", "Order not found")
    return order_to_dict(result.data, include_id_info=True), 200


@bp.put("/admin/orders/<order_id>")
@admin_area_required
def edit_order(order_id: str):
    oid = _order_id(order_id)
    data = get_json()
    values = {k: text(data, k) for k in ("customerName", "email", "phone", "street", "city", "state", "zip")}
    abort_if_errors(validate_order_edit(values))
    v = {k: s.strip() for k, s in values.items()}
    order_queries.update_order(
        get_actor(),
        oid,
        v["customerName"],
        v["email"],
        v["phone"],
        ShippingAddress(street=v["street"], city=v["city"], state=v["state"], zip=v["zip"]),
    )
    return {"id": oid, "message": "updated"}, 200


@bp.delete("/admin/orders/<order_id>")
@admin_area_required
def delete_order(order_id: str):
    oid = _order_id(order_id)
    order_queries.delete_order(get_actor(), oid)
    return {"id": oid, "message": "deleted"}, 200


@bp.put("/admin/orders/<order_id>/status")
@admin_area_required
def set_status(order_id: str):
    oid = _order_id(order_id)
    data = get_json()
    require_fields(data, ["status"])
    status = _enum_value(OrderStatus, text(data, "status"), "status")
    order_queries.update_order_status(get_actor(), oid, status)
    return {"id": oid, "status": status.value}, 200


@bp.put("/admin/orders/<order_id>/payment-contact")
@admin_area_required
def set_payment_contact(order_id: str):
    oid = _order_id(order_id)
    data = get_json()
    require_fields(data, ["status"])
    status = _enum_value(PaymentContactStatus, text(data, "status"), "status")
    notes = text(data, "notes")
    order_queries.update_payment_contact_status(get_actor(), oid, status, notes)
    return {"id": oid, "payment_contact_status": status.value, "contact_notes": notes}, 200


@bp.put("/admin/orders/<order_id>/tracking")
@admin_area_required
def set_tracking(order_id: str):
    oid = _order_id(order_id)
    data = get_json()
    require_fields(data, ["tracking_number"])
    tracking = text(data, "tracking_number").strip()
    if not tracking:
        abort_json(400, "validation_error", "Tracking number is required", {"fields": {"tracking_number": "Tracking number is required"}})
    order_queries.set_tracking_number(get_actor(), oid, tracking)
    return {"id": oid, "tracking_number": tracking}, 200


# --- users / bans ---
@bp.get("/admin/users")
@admin_area_required
def list_users():
    users = known_users(load_all_orders(), load_banned())
    return {
        "items": [
            {"principal": u.principal, "customer_name": u.customer_name, "email": u.email, "banned": u.banned}
            for u in users
        ]
    }, 200


@bp.get("/admin/bans")
@admin_area_required
def list_bans():
    return {"items": load_banned()}, 200


@bp.post("/admin/bans")
@admin_area_required
def ban():
    data = get_json()
    principal = text(data, "principal").strip()
    error = validate_principal_input(principal)
    if error:
        abort_json(400, "validation_error", error, {"fields": {"principal": error}})
    ban_queries.ban_user(get_actor(), principal)
    return {"principal": principal, "banned": True}, 201


@bp.delete("/admin/bans/<principal>")
@admin_area_required
def unban(principal: str):
    ban_queries.unban_user(get_actor(), principal)
    return {"principal": principal, "banned": False}, 200


# --- admin invitations ---
@bp.get("/admin/invitation")
@login_required
def invitation():
    result = access_queries.admin_invitation(get_actor())
    return {
        "has_invitation": result.data is True,
        "is_fetched": result.is_fetched,
        "error": format_error_message(result.error) if result.error is not None else None,
    }, 200


@bp.post("/admin/invitation/accept")
@login_required
@not_banned
def accept_invitation():
    actor = get_actor()
    access_queries.accept_admin_invitation(actor)
    return {"is_admin": check_admin_access(actor).is_admin}, 200


@bp.post("/admin/invitation/decline")
@login_required
def decline_invitation():
    access_queries.decline_admin_invitation(get_actor())
    return {"message": "invitation_declined"}, 200


@bp.post("/admin/invitations")
@admin_required
def invite():
    data = get_json()
    principal = text(data, "principal").strip()
    error = validate_principal_input(principal)
    if error:
        abort_json(400, "validation_error", error, {"fields": {"principal": error}})
    access_queries.invite_admin(get_actor(), principal)
    return {"principal": principal, "invited": True}, 201

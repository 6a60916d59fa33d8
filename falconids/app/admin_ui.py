"""Admin pages: orders dashboard, order details, users/bans, panel login."""

from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request

from falconids.app.backend.connection import get_actor
from falconids.app.backend.interface import BackendTrap
from falconids.app.backend.types import OrderStatus, PaymentContactStatus, ShippingAddress
from falconids.app.common.admin_session import admin_panel_session
from falconids.app.common.auth import admin_area_required, login_required
from falconids.app.common.error_formatting import format_error_message
from falconids.app.common.forms import validate_order_edit, validate_principal_input
from falconids.app.queries import access as access_queries
from falconids.app.queries import bans as ban_queries
from falconids.app.queries import orders as order_queries
from falconids.app.queries.access import check_admin_access
from falconids.app.routing import Route, path_for
from falconids.app.ui import page
from falconids.modules.admin.dashboard import filter_orders, known_users, order_stats

logger = logging.getLogger(__name__)

admin_ui_bp = Blueprint("admin_ui", __name__)


def _details_path(order_id: int) -> str:
    return path_for(Route.admin_order_details, str(order_id))


def _run(action, success: str) -> None:
    """Call a mutation and flash the outcome."""
    try:
        action()
    except BackendTrap as exc:
        flash(format_error_message(exc), "error")
    else:
        flash(success, "success")


@page(Route.admin)
@admin_area_required
def dashboard_page(identifier: str):
    actor = get_actor()
    result = order_queries.all_orders(actor, check_admin_access(actor).is_admin)
    orders = result.data or []
    status = request.args.get("status", "all")
    payment = request.args.get("payment", "all")
    search = request.args.get("search", "")
    return render_template(
        "admin/orders.html",
        orders=filter_orders(orders, status, payment, search),
        stats=order_stats(orders),
        has_orders=bool(orders),
        is_filtering=bool(search.strip()) or status != "all" or payment != "all",
        status=status,
        payment=payment,
        search=search,
        error=format_error_message(result.error) if result.error is not None else "",
        statuses=list(OrderStatus),
        payment_statuses=list(PaymentContactStatus),
    )


@page(Route.admin_order_details)
@admin_area_required
def order_details_page(identifier: str):
    try:
        order_id = int(identifier)
    except ValueError:
        return render_template("admin/order_details.html", order=None, errors={}), 404
    result = order_queries.order_detail(get_actor(), order_id)
    if result.error is not None:
        raise result.error
    status = 200 if result.data is not None else 404
    return (
        render_template(
            "admin/order_details.html",
            order=result.data,
            errors={},
            statuses=list(OrderStatus),
            payment_statuses=list(PaymentContactStatus),
        ),
        status,
    )


@page(Route.admin_users)
@admin_area_required
def users_page(identifier: str):
    actor = get_actor()
    is_admin = check_admin_access(actor).is_admin
    orders = order_queries.all_orders(actor, is_admin).data or []
    banned = ban_queries.banned_users(actor, is_admin).data or []
    return render_template(
        "admin/users.html",
        users=known_users(orders, banned),
        banned=banned,
    )


@page(Route.admin_login)
@login_required
def login_page(identifier: str):
    if admin_panel_session(get_actor().caller).is_logged_in:
        return redirect(path_for(Route.admin))
    return render_template("admin/login.html", next=request.args.get("next", ""), error="")


# --- panel session ---
@admin_ui_bp.post("/admin/login")
@login_required
def login_post():
    actor = get_actor()
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password") or ""
    if not username or not password:
        return render_template("admin/login.html", next="", error="Please enter both username and password"), 400
    if not actor.admin_login(username, password):
        logger.warning("admin panel login failed for %s", actor.caller)
        return render_template("admin/login.html", next="", error="Invalid username or password"), 401
    admin_panel_session(actor.caller).set_logged_in()
    flash("Logged into the admin panel.", "success")
    target = request.form.get("next") or ""
    return redirect(target if target.startswith("/admin") else path_for(Route.admin))


@admin_ui_bp.post("/admin/logout")
@login_required
def logout_post():
    admin_panel_session(get_actor().caller).clear_logged_in()
    flash("Logged out of the admin panel.", "success")
    return redirect(path_for(Route.home))


# --- order actions ---
@admin_ui_bp.post("/admin/orders/<int:order_id>/status")
@admin_area_required
def status_post(order_id: int):
    try:
        status = OrderStatus(request.form.get("status") or "")
    except ValueError:
        flash("Unknown order status.", "error")
        return redirect(_details_path(order_id))
    _run(lambda: order_queries.update_order_status(get_actor(), order_id, status), "Order status updated")
    return redirect(_details_path(order_id))


@admin_ui_bp.post("/admin/orders/<int:order_id>/payment-contact")
@admin_area_required
def payment_contact_post(order_id: int):
    try:
        status = PaymentContactStatus(request.form.get("status") or "")
    except ValueError:
        flash("Unknown payment contact status.", "error")
        return redirect(_details_path(order_id))
    notes = request.form.get("notes") or ""
    _run(
        lambda: order_queries.update_payment_contact_status(get_actor(), order_id, status, notes),
        "Payment contact status updated",
    )
    return redirect(_details_path(order_id))


@admin_ui_bp.post("/admin/orders/<int:order_id>/edit")
@admin_area_required
def edit_post(order_id: int):
    values = {k: (request.form.get(k) or "") for k in ("customerName", "email", "phone", "street", "city", "state", "zip")}
    errors = validate_order_edit(values)
    if errors:
        order = order_queries.order_detail(get_actor(), order_id).data
        return (
            render_template(
                "admin/order_details.html",
                order=order,
                errors=errors,
                edit_values=values,
                statuses=list(OrderStatus),
                payment_statuses=list(PaymentContactStatus),
            ),
            400,
        )
    v = {k: s.strip() for k, s in values.items()}
    _run(
        lambda: order_queries.update_order(
            get_actor(),
            order_id,
            v["customerName"],
            v["email"],
            v["phone"],
            ShippingAddress(street=v["street"], city=v["city"], state=v["state"], zip=v["zip"]),
        ),
        "Order updated",
    )
    return redirect(_details_path(order_id))


@admin_ui_bp.post("/admin/orders/<int:order_id>/tracking")
@admin_area_required
def tracking_post(order_id: int):
    tracking = (request.form.get("tracking_number") or "").strip()
    if not tracking:
        flash("Tracking number is required", "error")
    else:
        _run(lambda: order_queries.set_tracking_number(get_actor(), order_id, tracking), "Tracking number saved")
    return redirect(_details_path(order_id))


@admin_ui_bp.post("/admin/orders/<int:order_id>/delete")
@admin_area_required
def delete_post(order_id: int):
    try:
        order_queries.delete_order(get_actor(), order_id)
    except BackendTrap as exc:
        flash(format_error_message(exc), "error")
        return redirect(_details_path(order_id))
    flash(f"Order #{order_id} deleted", "success")
    return redirect(path_for(Route.admin))


# --- bans ---
@admin_ui_bp.post("/admin/users/ban")
@admin_area_required
def ban_post():
    principal = (request.form.get("principal") or "").strip()
    error = validate_principal_input(principal)
    if error:
        flash(error, "error")
        return redirect(path_for(Route.admin_users))
    _run(lambda: ban_queries.ban_user(get_actor(), principal), "User banned successfully")
    return redirect(path_for(Route.admin_users))


@admin_ui_bp.post("/admin/users/unban")
@admin_area_required
def unban_post():
    principal = (request.form.get("principal") or "").strip()
    _run(lambda: ban_queries.unban_user(get_actor(), principal), "User unbanned successfully")
    return redirect(path_for(Route.admin_users))


@admin_ui_bp.post("/admin/users/invite")
@admin_area_required
def invite_post():
    principal = (request.form.get("principal") or "").strip()
    error = validate_principal_input(principal)
    if error:
        flash(error, "error")
        return redirect(path_for(Route.admin_users))
    _run(lambda: access_queries.invite_admin(get_actor(), principal), "Admin invitation sent")
    return redirect(path_for(Route.admin_users))

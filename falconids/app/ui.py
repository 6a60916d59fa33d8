"""Server-rendered storefront pages.

Every page GET goes through :func:`dispatch`, which resolves the location
with ``parse_location`` and calls the view registered for that route.
Unknown locations render the home page. Form posts have their own routes.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict

from flask import Blueprint, Response, abort, current_app, flash, redirect, render_template, request

from falconids.app.backend.connection import get_actor
from falconids.app.backend.interface import BackendTrap
from falconids.app.backend.types import ExternalBlob, UserProfile
from falconids.app.common.auth import login_required, not_banned, profile_required
from falconids.app.common.error_formatting import format_error_message
from falconids.app.common.errors import abort_json
from falconids.app.common.files import data_url_to_bytes, file_to_bytes, validate_image
from falconids.app.common.formatting import pricing_tiers
from falconids.app.common.forms import validate_order_form, validate_profile
from falconids.app.common.generators import US_STATES
from falconids.app.common.identity import authenticate, create_account
from falconids.app.common.validation import is_valid_email
from falconids.app.models import Account
from falconids.app.queries import orders as order_queries
from falconids.app.queries import access as access_queries
from falconids.app.queries.access import check_admin_access, restore_admin
from falconids.app.queries.profile import caller_profile, save_caller_profile
from falconids.app.routing import Route, parse_location, path_for
from falconids.modules.auth.routes import end_session, start_session
from falconids.modules.orders.routes import ORDER_TEXT_FIELDS, apply_generated_values, build_order_args

logger = logging.getLogger(__name__)

ui_bp = Blueprint("ui", __name__)

PageView = Callable[[str], object]
PAGES: Dict[Route, PageView] = {}


def page(route: Route) -> Callable[[PageView], PageView]:
    """Register the view that renders `route`."""

    def decorator(fn: PageView) -> PageView:
        PAGES[route] = fn
        return fn

    return decorator


@ui_bp.get("/", defaults={"location": ""})
@ui_bp.get("/<path:location>")
def dispatch(location: str):
    if location.startswith("api/"):
        abort(404)
    match = parse_location(location)
    return PAGES[match.route](match.identifier)


@ui_bp.get("/go")
def go():
    """Follow a hash link such as ``#/admin/orders/42``."""
    match = parse_location(request.args.get("to", ""))
    return redirect(path_for(match.route, match.identifier))


# --- customer pages ---
@page(Route.home)
def home_page(identifier: str):
    return render_template("pages/home.html")


@page(Route.prices)
def prices_page(identifier: str):
    price = current_app.config.get("PRICE_PER_ID_CENTS", 10000)
    return render_template("pages/prices.html", tiers=pricing_tiers(price), price_cents=price)


def _render_order_form(values=None, errors=None, general_error: str = "", status: int = 200):
    return (
        render_template(
            "pages/order.html",
            values=values or {},
            errors=errors or {},
            general_error=general_error,
            states=US_STATES,
        ),
        status,
    )


@page(Route.order)
@login_required
@not_banned
@profile_required
def order_page(identifier: str):
    return _render_order_form()


@page(Route.order_confirmation)
@login_required
def confirmation_page(identifier: str):
    try:
        order_id = int(identifier)
    except ValueError:
        return render_template("pages/confirmation.html", order_id=None, status=None), 404
    result = order_queries.order_status(get_actor(), order_id)
    return render_template("pages/confirmation.html", order_id=order_id, status=result.data)


@page(Route.my_orders)
@login_required
@not_banned
def my_orders_page(identifier: str):
    actor = get_actor()
    result = order_queries.my_orders(actor)
    selected = None
    if identifier:
        try:
            selected = order_queries.order_detail(actor, int(identifier)).data
        except ValueError:
            selected = None
    return render_template(
        "pages/my_orders.html",
        orders=result.data or [],
        error=format_error_message(result.error) if result.error is not None else "",
        selected=selected,
        selected_id=identifier,
    )


@page(Route.profile)
@login_required
@not_banned
def profile_page(identifier: str):
    actor = get_actor()
    result = caller_profile(actor)
    return render_template(
        "pages/profile.html",
        profile=result.data,
        principal=actor.caller,
        is_admin=check_admin_access(actor).is_admin,
        has_invitation=access_queries.admin_invitation(actor).data is True,
        error="",
    )


# --- form posts ---
@ui_bp.post("/order")
@login_required
@not_banned
def order_submit():
    values = {k: (request.form.get(k) or "") for k in ORDER_TEXT_FIELDS}
    apply_generated_values(values, bool(request.form.get("generateName")), bool(request.form.get("generateIdAddress")))

    errors: Dict[str, str] = {}
    photo = None
    upload = request.files.get("photo")
    if upload and upload.filename:
        data = file_to_bytes(upload)
        check = validate_image(upload.mimetype, len(data), current_app.config.get("MAX_IMAGE_BYTES"))
        if check.valid:
            photo = ExternalBlob.from_bytes(data, content_type=upload.mimetype)
        else:
            errors["photo"] = check.error

    signature = None
    signature_url = request.form.get("signature") or ""
    if signature_url:
        try:
            mime, data = data_url_to_bytes(signature_url)
            signature = ExternalBlob.from_bytes(data, content_type=mime)
        except ValueError:
            errors["signature"] = "Signature is required"

    form_errors = validate_order_form(values, has_photo=photo is not None or "photo" in errors, has_signature=signature is not None)
    form_errors.update(errors)
    if form_errors:
        return _render_order_form(values, form_errors, "Please fix the errors above before submitting", 400)

    try:
        order_id = order_queries.submit_order(get_actor(), **build_order_args(values, photo, signature))
    except (PermissionError, BackendTrap) as exc:
        logger.info("order submission rejected: %s", format_error_message(exc))
        return _render_order_form(values, {}, format_error_message(exc), 400)
    flash("Your order has been submitted.", "success")
    return redirect(path_for(Route.order_confirmation, str(order_id)))


INVITATION_ACTIONS = {
    "accept-invitation": (access_queries.accept_admin_invitation, "Admin access granted! You can now access the Admin Panel."),
    "decline-invitation": (access_queries.decline_admin_invitation, "Admin invitation declined"),
}


@ui_bp.post("/profile")
@login_required
@not_banned
def profile_post():
    actor = get_actor()
    if request.form.get("action") == "restore-admin":
        try:
            restore_admin(actor)
            flash("Admin access restored successfully", "success")
        except BackendTrap as exc:
            flash(format_error_message(exc), "error")
        return redirect(path_for(Route.profile))
    if request.form.get("action") in INVITATION_ACTIONS:
        mutation, message = INVITATION_ACTIONS[request.form["action"]]
        try:
            mutation(actor)
            flash(message, "success")
        except BackendTrap as exc:
            flash(format_error_message(exc), "error")
        return redirect(path_for(Route.profile))

    profile = UserProfile(
        name=(request.form.get("name") or "").strip(),
        email=(request.form.get("email") or "").strip(),
        phone=(request.form.get("phone") or "").strip(),
    )
    errors = validate_profile(profile.name, profile.email, profile.phone)
    if errors:
        return (
            render_template(
                "pages/profile.html",
                profile=profile,
                principal=actor.caller,
                is_admin=check_admin_access(actor).is_admin,
                has_invitation=access_queries.admin_invitation(actor).data is True,
                error=errors["form"],
            ),
            400,
        )
    save_caller_profile(actor, profile)
    flash("Profile saved successfully", "success")
    return redirect(path_for(Route.profile))


# --- login / register ---
@ui_bp.get("/login")
def login_page():
    return render_template("pages/login.html", next=request.args.get("next", ""))


@ui_bp.post("/login")
def login_post():
    account = authenticate(request.form.get("email") or "", request.form.get("password") or "")
    if not account:
        flash("Invalid email or password.", "error")
        return redirect("/login")
    start_session(account)
    flash("Logged in.", "success")
    return redirect(_safe_next(request.form.get("next")))


@ui_bp.get("/register")
def register_page():
    return render_template("pages/register.html")


@ui_bp.post("/register")
def register_post():
    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""
    if not email or not password:
        flash("Email and password are required.", "error")
        return redirect("/register")
    if not is_valid_email(email):
        flash("Please enter a valid email address", "error")
        return redirect("/register")
    if Account.query.filter_by(email=email).first():
        flash("Email already registered.", "error")
        return redirect("/register")
    start_session(create_account(email, password))
    flash("Account created. Please complete your profile.", "success")
    return redirect(path_for(Route.profile))


@ui_bp.post("/logout")
def logout_post():
    end_session()
    flash("Logged out.", "success")
    return redirect(path_for(Route.home))


def _safe_next(target) -> str:
    # Only local paths, normalised through the router.
    if target and target.startswith("/") and not target.startswith("//"):
        match = parse_location(target)
        return path_for(match.route, match.identifier)
    return path_for(Route.home)


# --- uploads ---
@ui_bp.get("/blobs/<int:blob_id>")
@login_required
def blob(blob_id: int):
    stored = get_actor().get_blob(blob_id)
    if stored is None:
        abort_json(404, "not_found", "File not found")
    return Response(stored.data, mimetype=stored.content_type, headers={"Cache-Control": "private, max-age=300"})


# Registers the admin page views in PAGES.
from falconids.app import admin_ui  # noqa: E402,F401

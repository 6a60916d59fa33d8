from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from flask import Blueprint, current_app

from falconids.app.backend.connection import get_actor
from falconids.app.backend.types import ExternalBlob, IDInformation, ShippingAddress
from falconids.app.common.auth import login_required, not_banned
from falconids.app.common.errors import abort_json
from falconids.app.common.files import data_url_to_bytes, validate_image
from falconids.app.common.formatting import order_to_dict, pricing_tiers
from falconids.app.common.forms import ORDER_RULES, validate_order_field, validate_order_form
from falconids.app.common.generators import generate_address, generate_full_name
from falconids.app.common.validation import abort_if_errors, get_json, require_fields, text
from falconids.app.queries import orders as order_queries

bp = Blueprint("orders", __name__)

ORDER_TEXT_FIELDS = tuple(ORDER_RULES) + ("idWeight",)


def apply_generated_values(values: Dict[str, str], generate_name: bool, generate_id_address: bool) -> Dict[str, str]:
    """Fill the ID name and/or ID address with random values when asked to."""
    if generate_name:
        values["idName"] = generate_full_name()
    if generate_id_address:
        address = generate_address()
        values["idStreet"] = address["street"]
        values["idCity"] = address["city"]
        values["idState"] = address["state"]
        values["idZip"] = address["zip"]
    return values


def build_order_args(values: Mapping[str, str], photo: ExternalBlob, signature: ExternalBlob) -> Dict[str, Any]:
    v = {k: (values.get(k) or "").strip() for k in ORDER_TEXT_FIELDS}
    return {
        "customer_name": v["customerName"],
        "email": v["email"],
        "phone": v["phone"],
        "shipping_address": ShippingAddress(street=v["street"], city=v["city"], state=v["state"], zip=v["zip"]),
        "id_info": IDInformation(
            name=v["idName"],
            date_of_birth=v["idDateOfBirth"],
            sex=v["idSex"],
            height=v["idHeight"],
            weight=v["idWeight"],
            hair_color=v["idHairColor"],
            eye_color=v["idEyeColor"],
            address=ShippingAddress(street=v["idStreet"], city=v["idCity"], state=v["idState"], zip=v["idZip"]),
            photo=photo,
            signature=signature,
        ),
    }


def _blob_from_data_url(url: Optional[str], field: str, errors: Dict[str, str], check_image: bool) -> Optional[ExternalBlob]:
    if not url:
        return None
    try:
        mime, data = data_url_to_bytes(url)
    except ValueError:
        errors[field] = "Photo is required" if field == "photo" else "Signature is required"
        return None
    if check_image:
        result = validate_image(mime, len(data), current_app.config.get("MAX_IMAGE_BYTES"))
        if not result.valid:
            errors[field] = result.error
            return None
    return ExternalBlob.from_bytes(data, content_type=mime)


def _parse_order_id(order_id: str) -> int:
    try:
        return int(order_id)
    except ValueError:
        abort_json(404, "not_found", "Order not found")


@bp.post("/orders/validate-field")
def validate_field():
    """Single-field check used when a form input loses focus."""
    data = get_json()
    require_fields(data, ["field"])
    error = validate_order_field(text(data, "field"), text(data, "value"))
    return {"field": data["field"], "valid": error is None, "error": error}, 200


@bp.post("/orders")
@login_required
@not_banned
def submit_order():
    """POST /api/orders - Place an order.

    Photo and signature are sent as data URLs in ``photo`` / ``signature``.
    """
    data = get_json()
    values = {k: text(data, k) for k in ORDER_TEXT_FIELDS}
    apply_generated_values(values, bool(data.get("generateName")), bool(data.get("generateIdAddress")))

    upload_errors: Dict[str, str] = {}
    photo = _blob_from_data_url(data.get("photo"), "photo", upload_errors, check_image=True)
    signature = _blob_from_data_url(data.get("signature"), "signature", upload_errors, check_image=False)

    errors = validate_order_form(values, has_photo=photo is not None, has_signature=signature is not None)
    errors.update(upload_errors)
    abort_if_errors(errors)

    try:
        order_id = order_queries.submit_order(get_actor(), **build_order_args(values, photo, signature))
    except PermissionError as exc:
        abort_json(401, "not_authenticated", str(exc))
    return {"id": order_id, "confirmation_url": f"/confirmation/{order_id}"}, 201


@bp.get("/orders")
@login_required
@not_banned
def list_my_orders():
    result = order_queries.my_orders(get_actor())
    if result.error is not None:
        raise result.error
    return {"items": [order_to_dict(o) for o in result.data or []]}, 200


@bp.get("/orders/<order_id>")
@login_required
@not_banned
def get_order(order_id: str):
    oid = _parse_order_id(order_id)
    result = order_queries.order_detail(get_actor(), oid)
    if result.error is not None:
        raise result.error
    if result.data is None:
        abort_json(404, "not_found", "Order not found")
    return order_to_dict(result.data, include_id_info=True), 200


@bp.get("/orders/<order_id>/status")
def get_order_status(order_id: str):
    oid = _parse_order_id(order_id)
    result = order_queries.order_status(get_actor(), oid)
    if result.error is not None:
        raise result.error
    if result.data is None:
        abort_json(404, "not_found", "Order not found")
    return {"id": oid, "status": result.data.value}, 200


@bp.get("/prices")
def prices():
    price = current_app.config.get("PRICE_PER_ID_CENTS", 10000)
    return {"price_per_id_cents": price, "copies_per_id": 2, "tiers": pricing_tiers(price)}, 200

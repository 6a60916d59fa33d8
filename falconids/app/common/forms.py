"""Form rules for the order, profile, admin edit and ban forms.

Validators return ``{field: message}``; an empty dict means the form is
valid. Field names match the ones posted by the order form and the JSON API.
"""

from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional

from falconids.app.common.identity import is_valid_principal
from falconids.app.common.validation import is_valid_email, is_valid_zip

CONTACT_FIELDS = ("customerName", "email", "phone")
SHIPPING_FIELDS = ("street", "city", "state", "zip")
ID_FIELDS = (
    "idName",
    "idDateOfBirth",
    "idSex",
    "idHeight",
    "idHairColor",
    "idEyeColor",
    "idStreet",
    "idCity",
    "idState",
    "idZip",
)
ORDER_FIELDS = CONTACT_FIELDS + SHIPPING_FIELDS + ID_FIELDS


def _required(message: str, min_length: int = 0, short_message: str = "") -> Callable[[str], Optional[str]]:
    def check(value: str) -> Optional[str]:
        value = value.strip()
        if not value:
            return message
        if min_length and len(value) < min_length:
            return short_message
        return None

    return check


def _email(value: str) -> Optional[str]:
    if not value.strip():
        return "Email address is required"
    if not is_valid_email(value):
        return "Please enter a valid email address"
    return None


def _zip(required_message: str) -> Callable[[str], Optional[str]]:
    def check(value: str) -> Optional[str]:
        if not value.strip():
            return required_message
        if not is_valid_zip(value):
            return "Please enter a valid ZIP code"
        return None

    return check


ORDER_RULES: Dict[str, Callable[[str], Optional[str]]] = {
    "customerName": _required("Full name is required", 2, "Name must be at least 2 characters"),
    "email": _email,
    "phone": _required("Phone number is required", 10, "Please enter a valid phone number"),
    "street": _required("Street address is required", 5, "Please enter a complete street address"),
    "city": _required("City is required", 2, "Please enter a valid city name"),
    "state": _required("State is required"),
    "zip": _zip("ZIP code is required"),
    "idName": _required("Name on ID is required", 2, "Name must be at least 2 characters"),
    "idDateOfBirth": _required("Date of birth is required"),
    "idSex": _required("Sex/Gender is required"),
    "idHeight": _required("Height is required"),
    "idHairColor": _required("Hair color is required"),
    "idEyeColor": _required("Eye color is required"),
    "idStreet": _required("ID address street is required"),
    "idCity": _required("ID address city is required"),
    "idState": _required("ID address state is required"),
    "idZip": _zip("ID address ZIP is required"),
}


def validate_order_field(field: str, value: Optional[str]) -> Optional[str]:
    """Check one field (on blur). Unknown fields are never in error."""
    rule = ORDER_RULES.get(field)
    if rule is None:
        return None
    return rule(value or "")


def validate_order_form(
    values: Mapping[str, Optional[str]],
    has_photo: bool,
    has_signature: bool,
) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for field in ORDER_FIELDS:
        message = validate_order_field(field, values.get(field))
        if message:
            errors[field] = message
    if not has_photo:
        errors["photo"] = "Photo is required"
    if not has_signature:
        errors["signature"] = "Signature is required"
    return errors


def validate_profile(name: str, email: str, phone: str) -> Dict[str, str]:
    if not (name or "").strip() or not (email or "").strip() or not (phone or "").strip():
        return {"form": "All fields are required"}
    return {}


def validate_order_edit(values: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Admin edit of an existing order: contact details and shipping address."""
    v = {k: (values.get(k) or "").strip() for k in CONTACT_FIELDS + SHIPPING_FIELDS}
    errors: Dict[str, str] = {}
    if not v["customerName"]:
        errors["customerName"] = "Customer name is required"
    if not v["email"]:
        errors["email"] = "Email is required"
    elif not is_valid_email(v["email"]):
        errors["email"] = "Invalid email format"
    if not v["phone"]:
        errors["phone"] = "Phone is required"
    if not v["street"]:
        errors["street"] = "Street address is required"
    if not v["city"]:
        errors["city"] = "City is required"
    if not v["state"]:
        errors["state"] = "State is required"
    if not v["zip"]:
        errors["zip"] = "ZIP code is required"
    return errors


def validate_principal_input(text: Optional[str]) -> Optional[str]:
    text = (text or "").strip()
    if not text:
        return "Please enter a principal ID"
    if not is_valid_principal(text):
        return "Invalid principal ID format"
    return None

import random

import pytest

from falconids.app.common.files import data_url_to_bytes, validate_image
from falconids.app.common.forms import (
    ORDER_FIELDS,
    validate_principal_input,
    validate_order_edit,
    validate_order_field,
    validate_order_form,
    validate_profile,
)
from falconids.app.common.generators import US_STATES, generate_address, generate_full_name
from falconids.app.common.identity import is_valid_principal, new_principal
from falconids.app.common.validation import is_valid_email, is_valid_zip


# FORM-001: email pattern
@pytest.mark.parametrize("value, ok", [("abc", False), ("a@b", False), ("a b@c.d", False), ("a@b.co", True)])
def test_email(value, ok):
    assert is_valid_email(value) is ok


# FORM-002: ZIP pattern (5 or 5+4 digits)
@pytest.mark.parametrize("value, ok", [("12345", True), ("12345-6789", True), ("1234", False), ("123456", False), ("abcde", False)])
def test_zip(value, ok):
    assert is_valid_zip(value) is ok


# FORM-003: blur validation messages
@pytest.mark.parametrize(
    "field, value, message",
    [
        ("customerName", "", "Full name is required"),
        ("customerName", "A", "Name must be at least 2 characters"),
        ("email", "  ", "Email address is required"),
        ("email", "abc", "Please enter a valid email address"),
        ("phone", "555", "Please enter a valid phone number"),
        ("street", "1 A", "Please enter a complete street address"),
        ("city", "X", "Please enter a valid city name"),
        ("state", "", "State is required"),
        ("zip", "1234", "Please enter a valid ZIP code"),
        ("idName", "", "Name on ID is required"),
        ("idSex", "", "Sex/Gender is required"),
        ("idZip", "", "ID address ZIP is required"),
        ("idZip", "99", "Please enter a valid ZIP code"),
    ],
)
def test_field_messages(field, value, message):
    assert validate_order_field(field, value) == message


def test_valid_field_and_unknown_field():
    assert validate_order_field("zip", " 12345 ") is None
    assert validate_order_field("idWeight", "") is None
    assert validate_order_field("nonsense", "") is None


# FORM-004: empty submit reports every required field
def test_empty_order_form_has_error_per_field():
    errors = validate_order_form({}, has_photo=False, has_signature=False)
    assert set(errors) == set(ORDER_FIELDS) | {"photo", "signature"}
    assert errors["photo"] == "Photo is required"
    assert errors["signature"] == "Signature is required"


def test_profile_requires_all_fields():
    assert validate_profile("Jane", "", "555") == {"form": "All fields are required"}
    assert validate_profile("Jane", "j@x.io", "555") == {}


def test_order_edit_rules():
    errors = validate_order_edit({"customerName": "", "email": "bad", "phone": "", "street": "x", "city": "y", "state": "z", "zip": ""})
    assert errors == {
        "customerName": "Customer name is required",
        "email": "Invalid email format",
        "phone": "Phone is required",
        "zip": "ZIP code is required",
    }


def test_ban_principal_input():
    assert validate_principal_input("") == "Please enter a principal ID"
    assert validate_principal_input("not a principal!") == "Invalid principal ID format"
    assert validate_principal_input(new_principal()) is None


def test_new_principal_format():
    p = new_principal()
    assert is_valid_principal(p)
    groups = p.split("-")
    assert all(len(group) == 5 for group in groups[:-1])
    assert 1 <= len(groups[-1]) <= 5


# FILE-001: image checks
def test_validate_image():
    assert validate_image("image/png", 100).valid
    assert validate_image("image/webp", 100).valid
    gif = validate_image("image/gif", 100)
    assert not gif.valid and gif.error == "Please upload a valid image file (JPEG, PNG, or WebP)"
    big = validate_image("image/jpeg", 6 * 1024 * 1024)
    assert not big.valid and big.error == "File size must be less than 5MB"


def test_data_url_to_bytes():
    assert data_url_to_bytes("data:image/png;base64,aGVsbG8=") == ("image/png", b"hello")
    assert data_url_to_bytes("data:,hi%20there") == ("text/plain", b"hi there")
    with pytest.raises(ValueError):
        data_url_to_bytes("https://example.com/a.png")
    with pytest.raises(ValueError):
        data_url_to_bytes("data:image/png;base64,***")


# GEN-001: generated values satisfy the order form rules
def test_generated_values_are_valid():
    rng = random.Random(7)
    name = generate_full_name(rng)
    address = generate_address(rng)
    assert validate_order_field("idName", name) is None
    assert address["state"] in US_STATES
    assert validate_order_field("idZip", address["zip"]) is None
    assert validate_order_field("idStreet", address["street"]) is None


def test_patterns_match_whole_value():
    assert is_valid_email("a@b.co\n") is False
    assert is_valid_email("a@b.co\nx") is False
    assert is_valid_zip("12345\n6789") is False

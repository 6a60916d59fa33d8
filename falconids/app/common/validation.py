from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Optional
from flask import request

from falconids.app.common.errors import abort_json

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ZIP_RE = re.compile(r"^\d{5}(-\d{4})?$")


def get_json() -> Dict[str, Any]:
    if not request.is_json:
        abort_json(400, "invalid_json", "Request must be application/json")
    data = request.get_json(silent=True)
    if data is None or not isinstance(data, dict):
        abort_json(400, "invalid_json", "Malformed JSON body")
    return data


def require_fields(data: Dict[str, Any], fields: Iterable[str]) -> None:
    missing = [f for f in fields if f not in data]
    if missing:
        abort_json(400, "validation_error", "Missing required fields", {"missing": missing})


def abort_if_errors(errors: Dict[str, str], message: str = "Please fix the errors above before submitting") -> None:
    if errors:
        abort_json(400, "validation_error", message, {"fields": errors})


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.fullmatch(value or ""))


def is_valid_zip(value: str) -> bool:
    return bool(ZIP_RE.fullmatch((value or "").strip()))


def text(data: Dict[str, Any], key: str) -> str:
    value: Optional[Any] = data.get(key)
    return "" if value is None else str(value)

"""Turn backend/validation failures into text that is safe to show users."""

from __future__ import annotations

import re
from typing import Any, Optional

UNKNOWN_ERROR = "An unknown error occurred"

_QUERY_SECRETS = ("caffeineAdminToken", "token", "secret", "password", "apikey")
_QUERY_PATTERNS = [re.compile(rf"({name})=[^&\s]+", re.IGNORECASE) for name in _QUERY_SECRETS]
_BEARER = re.compile(r"Bearer\s+[^\s]+", re.IGNORECASE)
_TRAP = re.compile(r"\btrap[:\s]+(.+?)(?:\n|$)", re.IGNORECASE)


def redact_sensitive_info(message: str) -> str:
    for pattern in _QUERY_PATTERNS:
        message = pattern.sub(lambda m: f"{m.group(1)}=[REDACTED]", message)
    return _BEARER.sub("Bearer [REDACTED]", message)


def format_error_message(error: Any) -> str:
    message = UNKNOWN_ERROR
    if isinstance(error, BaseException):
        message = getattr(error, "message", None) or str(error) or UNKNOWN_ERROR
    elif isinstance(error, str):
        message = error
    elif isinstance(error, dict) and "message" in error:
        message = str(error["message"])
    elif error is not None and hasattr(error, "message"):
        message = str(error.message)
    return redact_sensitive_info(message)


def extract_backend_error(error: Any) -> Optional[str]:
    message = format_error_message(error)
    if "Unauthorized" in message:
        return "Unauthorized: You do not have permission to perform this action"
    match = _TRAP.search(message)
    if match:
        return match.group(1).strip()
    return None


def is_unauthorized(error: Any) -> bool:
    return "Unauthorized" in format_error_message(error)

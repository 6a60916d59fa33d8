from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from flask import g, request

from falconids.app.common.error_formatting import extract_backend_error, format_error_message, is_unauthorized


@dataclass
class ApiError(Exception):
    """Raise to return a consistent JSON error response."""

    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self, request_id: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details or {},
                "request_id": request_id,
            }
        }
        return payload

    def payload(self) -> Dict[str, Any]:
        return self.to_dict(g.get("request_id"))


def abort_json(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Convenience wrapper."""
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


def from_backend_trap(error: BaseException) -> ApiError:
    """Map a backend rejection to 403 (Unauthorized) or 400, with a redacted message."""
    message = format_error_message(error)
    shown = extract_backend_error(error) or message
    if is_unauthorized(error):
        return ApiError(403, "not_authorized", shown)
    return ApiError(400, "backend_error", shown)


def wants_json() -> bool:
    return request.path.startswith("/api/") or request.path == "/api"

"""Uploaded images: type/size checks and conversion to bytes."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import unquote_to_bytes

from werkzeug.datastructures import FileStorage

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
MAX_FILE_SIZE = 5 * 1024 * 1024

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w-]+=[^;,]*)*)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


@dataclass
class FileValidationResult:
    valid: bool
    error: Optional[str] = None


def validate_image(content_type: Optional[str], size: int, max_size: int = MAX_FILE_SIZE) -> FileValidationResult:
    if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        return FileValidationResult(False, "Please upload a valid image file (JPEG, PNG, or WebP)")
    if size > max_size:
        return FileValidationResult(False, f"File size must be less than {max_size // 1024 // 1024}MB")
    return FileValidationResult(True)


def file_to_bytes(upload: FileStorage) -> bytes:
    data = upload.read()
    upload.seek(0)
    return data


def data_url_to_bytes(url: str) -> Tuple[str, bytes]:
    """Decode a ``data:`` URL (e.g. a signature pad export) into (mime, bytes)."""
    match = _DATA_URL.match((url or "").strip())
    if not match:
        raise ValueError("Not a data URL")
    mime = match.group("mime") or "text/plain"
    payload = match.group("data")
    if match.group("b64"):
        try:
            return mime, base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Malformed base64 payload") from exc
    return mime, unquote_to_bytes(payload)

"""Records exchanged with the backend."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class OrderStatus(str, Enum):
    pending = "pending"
    shipped = "shipped"


class PaymentContactStatus(str, Enum):
    notContacted = "notContacted"
    contacted = "contacted"
    paymentReceived = "paymentReceived"


class UserRole(str, Enum):
    admin = "admin"
    user = "user"
    guest = "guest"


class ExternalBlob:
    """Opaque reference to binary content (ID photo, signature).

    Built either from raw bytes (before upload) or from a URL (after the
    backend stored it). A URL blob may carry a loader so `get_bytes` can
    resolve it without another request.
    """

    def __init__(
        self,
        data: Optional[bytes] = None,
        url: Optional[str] = None,
        content_type: str = "application/octet-stream",
        loader: Optional[Callable[[], bytes]] = None,
    ):
        if data is None and url is None:
            raise ValueError("ExternalBlob needs bytes or a URL")
        self._data = data
        self._url = url
        self._loader = loader
        self.content_type = content_type

    @classmethod
    def from_bytes(cls, data: bytes, content_type: str = "application/octet-stream") -> "ExternalBlob":
        return cls(data=bytes(data), content_type=content_type)

    @classmethod
    def from_url(cls, url: str, loader: Optional[Callable[[], bytes]] = None) -> "ExternalBlob":
        return cls(url=url, loader=loader)

    def get_bytes(self) -> bytes:
        if self._data is None:
            if self._loader is None:
                raise ValueError(f"Blob at {self._url} has no loader")
            self._data = self._loader()
        return self._data

    def get_direct_url(self) -> str:
        if self._url:
            return self._url
        encoded = base64.b64encode(self._data or b"").decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"

    def __repr__(self) -> str:
        where = self._url or f"{len(self._data or b'')} bytes"
        return f"<ExternalBlob {where}>"


@dataclass
class ShippingAddress:
    street: str
    city: str
    state: str
    zip: str


@dataclass
class IDInformation:
    name: str
    date_of_birth: str
    sex: str
    height: str
    weight: str
    hair_color: str
    eye_color: str
    address: ShippingAddress
    photo: Optional[ExternalBlob] = None
    signature: Optional[ExternalBlob] = None


@dataclass
class Order:
    id: int
    owner: str
    customer_name: str
    email: str
    phone: str
    shipping_address: ShippingAddress
    id_info: IDInformation
    status: OrderStatus = OrderStatus.pending
    payment_contact_status: PaymentContactStatus = PaymentContactStatus.notContacted
    contact_notes: str = ""
    tracking_number: Optional[str] = None
    created_time: int = 0  # nanoseconds since epoch


@dataclass
class UserProfile:
    name: str
    email: str
    phone: str


@dataclass
class StoredBlob:
    content_type: str
    data: bytes = field(repr=False)

"""Operations the storefront calls on the order/profile/ban backend.

A `Backend` instance is an actor bound to one caller principal (or to the
anonymous caller). Forbidden calls raise `BackendTrap` with a message that
starts with "Unauthorized:".
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from falconids.app.backend.types import (
    IDInformation,
    Order,
    OrderStatus,
    PaymentContactStatus,
    ShippingAddress,
    StoredBlob,
    UserProfile,
    UserRole,
)


class BackendTrap(Exception):
    """The backend rejected a call."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Backend(ABC):
    caller: Optional[str]

    # --- identity / role ---
    @abstractmethod
    def ensure_user_role(self) -> None: ...

    @abstractmethod
    def get_caller_user_role(self) -> UserRole: ...

    @abstractmethod
    def is_caller_admin(self) -> bool: ...

    @abstractmethod
    def assign_caller_user_role(self, user: str, role: UserRole) -> None: ...

    @abstractmethod
    def assign_admin_role_to_caller(self) -> None: ...

    @abstractmethod
    def admin_login(self, username: str, password: str) -> bool: ...

    # --- admin invitations ---
    @abstractmethod
    def invite_admin(self, user: str) -> None: ...

    @abstractmethod
    def check_admin_invitation(self) -> bool: ...

    @abstractmethod
    def accept_admin_invitation(self) -> None: ...

    @abstractmethod
    def decline_admin_invitation(self) -> None: ...

    # --- profile ---
    @abstractmethod
    def get_caller_user_profile(self) -> Optional[UserProfile]: ...

    @abstractmethod
    def get_user_profile(self, user: str) -> Optional[UserProfile]: ...

    @abstractmethod
    def save_caller_user_profile(self, profile: UserProfile) -> None: ...

    # --- orders ---
    @abstractmethod
    def submit_order(
        self,
        customer_name: str,
        email: str,
        phone: str,
        shipping_address: ShippingAddress,
        id_info: IDInformation,
    ) -> int: ...

    def create_order(self, *args, **kwargs) -> int:
        return self.submit_order(*args, **kwargs)

    @abstractmethod
    def get_all_orders(self) -> List[Order]: ...

    @abstractmethod
    def get_my_orders(self) -> List[Order]: ...

    @abstractmethod
    def get_order(self, order_id: int) -> Optional[Order]: ...

    @abstractmethod
    def get_order_status(self, order_id: int) -> Optional[OrderStatus]: ...

    @abstractmethod
    def update_order_status(self, order_id: int, new_status: OrderStatus) -> None: ...

    @abstractmethod
    def update_payment_contact_status(self, order_id: int, new_status: PaymentContactStatus, notes: str) -> None: ...

    @abstractmethod
    def update_order(
        self,
        order_id: int,
        customer_name: str,
        email: str,
        phone: str,
        shipping_address: ShippingAddress,
    ) -> None: ...

    @abstractmethod
    def delete_order(self, order_id: int) -> None: ...

    @abstractmethod
    def add_or_update_tracking_number(self, order_id: int, tracking_number: str) -> None: ...

    # --- bans ---
    @abstractmethod
    def get_banned_users(self) -> List[str]: ...

    @abstractmethod
    def is_banned_user(self, user: str) -> bool: ...

    @abstractmethod
    def ban_user(self, user: str) -> None: ...

    @abstractmethod
    def unban_user(self, user: str) -> None: ...

    # --- blobs ---
    @abstractmethod
    def get_blob(self, blob_id: int) -> Optional[StoredBlob]: ...

"""SQLAlchemy-backed backend running in the same process as the storefront.

Each instance acts on behalf of one caller. Authorization lives here, the
same way it lives in the remote actor: pages never check ownership
themselves, they call and translate the trap.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from sqlalchemy import or_
from werkzeug.security import check_password_hash

from falconids.app.backend.interface import Backend, BackendTrap
from falconids.app.backend.types import (
    ExternalBlob,
    IDInformation,
    Order,
    OrderStatus,
    PaymentContactStatus,
    ShippingAddress,
    StoredBlob,
    UserProfile,
    UserRole,
)
from falconids.app.extensions import db
from falconids.app import models

logger = logging.getLogger(__name__)

BLOB_URL = "/blobs/{id}"


def _blob_ref(blob_id: Optional[int]) -> Optional[ExternalBlob]:
    if blob_id is None:
        return None

    def load() -> bytes:
        row = db.session.get(models.Blob, blob_id)
        if row is None:
            raise ValueError(f"blob {blob_id} is gone")
        return row.data

    return ExternalBlob.from_url(BLOB_URL.format(id=blob_id), loader=load)


def order_from_row(row: models.Order) -> Order:
    return Order(
        id=row.id,
        owner=row.owner,
        customer_name=row.customer_name,
        email=row.email,
        phone=row.phone,
        shipping_address=ShippingAddress(
            street=row.ship_street, city=row.ship_city, state=row.ship_state, zip=row.ship_zip
        ),
        id_info=IDInformation(
            name=row.id_name,
            date_of_birth=row.id_date_of_birth,
            sex=row.id_sex,
            height=row.id_height,
            weight=row.id_weight or "",
            hair_color=row.id_hair_color,
            eye_color=row.id_eye_color,
            address=ShippingAddress(street=row.id_street, city=row.id_city, state=row.id_state, zip=row.id_zip),
            photo=_blob_ref(row.photo_blob_id),
            signature=_blob_ref(row.signature_blob_id),
        ),
        status=OrderStatus(row.status),
        payment_contact_status=PaymentContactStatus(row.payment_contact_status),
        contact_notes=row.contact_notes or "",
        tracking_number=row.tracking_number,
        created_time=row.created_time,
    )


class LocalBackend(Backend):
    def __init__(
        self,
        caller: Optional[str],
        bootstrap_admin: str = "",
        admin_panel_username: str = "",
        admin_panel_password_hash: str = "",
    ):
        self.caller = caller or None
        self.bootstrap_admin = bootstrap_admin
        self.admin_panel_username = admin_panel_username
        self.admin_panel_password_hash = admin_panel_password_hash

    def __repr__(self) -> str:
        return f"<LocalBackend caller={self.caller!r}>"

    # --- guards ---
    def _role_of(self, principal: str) -> UserRole:
        row = db.session.get(models.RoleAssignment, principal)
        return UserRole(row.role) if row else UserRole.guest

    def _require_user(self, action: str) -> str:
        if not self.caller:
            raise BackendTrap(f"Unauthorized: Only authenticated users can {action}")
        return self.caller

    def _require_admin(self, action: str) -> str:
        caller = self._require_user(action)
        if self._role_of(caller) != UserRole.admin:
            raise BackendTrap(f"Unauthorized: Only admins can {action}")
        return caller

    def _require_not_banned(self, caller: str) -> None:
        if db.session.get(models.Ban, caller) is not None:
            raise BackendTrap("Unauthorized: Your account has been banned")

    def _order_row(self, order_id: int) -> models.Order:
        row = db.session.get(models.Order, int(order_id))
        if row is None:
            raise BackendTrap(f"Order {order_id} not found")
        return row

    def _set_role(self, principal: str, role: UserRole) -> None:
        row = db.session.get(models.RoleAssignment, principal)
        if row is None:
            db.session.add(models.RoleAssignment(principal=principal, role=role.value))
        else:
            row.role = role.value

    # --- identity / role ---
    def ensure_user_role(self) -> None:
        caller = self._require_user("be assigned a role")
        if db.session.get(models.RoleAssignment, caller) is None:
            self._set_role(caller, UserRole.user)
            db.session.commit()

    def get_caller_user_role(self) -> UserRole:
        if not self.caller:
            return UserRole.guest
        return self._role_of(self.caller)

    def is_caller_admin(self) -> bool:
        caller = self._require_user("check admin status")
        return self._role_of(caller) == UserRole.admin

    def assign_caller_user_role(self, user: str, role: UserRole) -> None:
        self._require_admin("assign user roles")
        self._set_role(user, UserRole(role))
        db.session.commit()

    def assign_admin_role_to_caller(self) -> None:
        caller = self._require_user("claim the admin role")
        if self._role_of(caller) == UserRole.admin:
            raise BackendTrap("Caller is already an admin")

        if self.bootstrap_admin:
            if caller != self.bootstrap_admin:
                raise BackendTrap("Unauthorized: Only the designated bootstrap principal can use this function")
        elif models.RoleAssignment.query.filter_by(role=UserRole.admin.value).first() is not None:
            raise BackendTrap("Bootstrap admin has already been assigned")

        self._set_role(caller, UserRole.admin)
        db.session.commit()
        logger.info("admin role assigned to %s", caller)

    def admin_login(self, username: str, password: str) -> bool:
        self._require_user("log into the admin panel")
        if not self.admin_panel_password_hash:
            return False
        if username != self.admin_panel_username:
            return False
        return check_password_hash(self.admin_panel_password_hash, password)

    # --- admin invitations ---
    def invite_admin(self, user: str) -> None:
        caller = self._require_admin("invite admins")
        if self._role_of(user) == UserRole.admin:
            raise BackendTrap("User is already an admin")
        if db.session.get(models.AdminInvitation, user) is None:
            db.session.add(models.AdminInvitation(principal=user, invited_by=caller))
            db.session.commit()
            logger.info("%s invited %s to become an admin", caller, user)

    def check_admin_invitation(self) -> bool:
        caller = self._require_user("check admin invitations")
        return db.session.get(models.AdminInvitation, caller) is not None

    def _pending_invitation(self, caller: str) -> models.AdminInvitation:
        row = db.session.get(models.AdminInvitation, caller)
        if row is None:
            raise BackendTrap("No pending admin invitation")
        return row

    def accept_admin_invitation(self) -> None:
        caller = self._require_user("accept admin invitations")
        self._require_not_banned(caller)
        db.session.delete(self._pending_invitation(caller))
        self._set_role(caller, UserRole.admin)
        db.session.commit()
        logger.info("%s accepted an admin invitation", caller)

    def decline_admin_invitation(self) -> None:
        caller = self._require_user("decline admin invitations")
        db.session.delete(self._pending_invitation(caller))
        db.session.commit()

    # --- profile ---
    def get_caller_user_profile(self) -> Optional[UserProfile]:
        caller = self._require_user("view profiles")
        return self._profile(caller)

    def _profile(self, principal: str) -> Optional[UserProfile]:
        row = db.session.get(models.Profile, principal)
        if row is None:
            return None
        return UserProfile(name=row.name, email=row.email, phone=row.phone)

    def get_user_profile(self, user: str) -> Optional[UserProfile]:
        caller = self._require_user("view profiles")
        if caller != user and self._role_of(caller) != UserRole.admin:
            raise BackendTrap("Unauthorized: Can only view your own profile")
        return self._profile(user)

    def save_caller_user_profile(self, profile: UserProfile) -> None:
        caller = self._require_user("save profiles")
        row = db.session.get(models.Profile, caller)
        if row is None:
            row = models.Profile(principal=caller, name=profile.name, email=profile.email, phone=profile.phone)
            db.session.add(row)
        else:
            row.name, row.email, row.phone = profile.name, profile.email, profile.phone
        if db.session.get(models.RoleAssignment, caller) is None:
            self._set_role(caller, UserRole.user)
        db.session.commit()

    # --- orders ---
    def _store_blob(self, blob: Optional[ExternalBlob]) -> Optional[int]:
        if blob is None:
            return None
        row = models.Blob(content_type=blob.content_type, data=blob.get_bytes())
        db.session.add(row)
        db.session.flush()
        return row.id

    def submit_order(
        self,
        customer_name: str,
        email: str,
        phone: str,
        shipping_address: ShippingAddress,
        id_info: IDInformation,
    ) -> int:
        caller = self._require_user("submit orders")
        self._require_not_banned(caller)

        row = models.Order(
            owner=caller,
            customer_name=customer_name,
            email=email,
            phone=phone,
            ship_street=shipping_address.street,
            ship_city=shipping_address.city,
            ship_state=shipping_address.state,
            ship_zip=shipping_address.zip,
            id_name=id_info.name,
            id_date_of_birth=id_info.date_of_birth,
            id_sex=id_info.sex,
            id_height=id_info.height,
            id_weight=id_info.weight or "",
            id_hair_color=id_info.hair_color,
            id_eye_color=id_info.eye_color,
            id_street=id_info.address.street,
            id_city=id_info.address.city,
            id_state=id_info.address.state,
            id_zip=id_info.address.zip,
            photo_blob_id=self._store_blob(id_info.photo),
            signature_blob_id=self._store_blob(id_info.signature),
            status=OrderStatus.pending.value,
            payment_contact_status=PaymentContactStatus.notContacted.value,
            contact_notes="",
            created_time=time.time_ns(),
        )
        db.session.add(row)
        if db.session.get(models.RoleAssignment, caller) is None:
            self._set_role(caller, UserRole.user)
        db.session.commit()
        logger.info("order %s submitted by %s", row.id, caller)
        return row.id

    def get_all_orders(self) -> List[Order]:
        self._require_admin("view all orders")
        rows = models.Order.query.order_by(models.Order.created_time.desc(), models.Order.id.desc()).all()
        return [order_from_row(r) for r in rows]

    def get_my_orders(self) -> List[Order]:
        caller = self._require_user("view their orders")
        rows = (
            models.Order.query.filter_by(owner=caller)
            .order_by(models.Order.created_time.desc(), models.Order.id.desc())
            .all()
        )
        return [order_from_row(r) for r in rows]

    def get_order(self, order_id: int) -> Optional[Order]:
        caller = self._require_user("view orders")
        row = db.session.get(models.Order, int(order_id))
        if row is None:
            return None
        if row.owner != caller and self._role_of(caller) != UserRole.admin:
            raise BackendTrap("Unauthorized: Can only view your own orders")
        return order_from_row(row)

    def get_order_status(self, order_id: int) -> Optional[OrderStatus]:
        row = db.session.get(models.Order, int(order_id))
        return OrderStatus(row.status) if row else None

    def update_order_status(self, order_id: int, new_status: OrderStatus) -> None:
        self._require_admin("update order status")
        row = self._order_row(order_id)
        row.status = OrderStatus(new_status).value
        db.session.commit()

    def update_payment_contact_status(self, order_id: int, new_status: PaymentContactStatus, notes: str) -> None:
        self._require_admin("update payment contact status")
        row = self._order_row(order_id)
        row.payment_contact_status = PaymentContactStatus(new_status).value
        row.contact_notes = notes or ""
        db.session.commit()

    def update_order(
        self,
        order_id: int,
        customer_name: str,
        email: str,
        phone: str,
        shipping_address: ShippingAddress,
    ) -> None:
        self._require_admin("edit orders")
        row = self._order_row(order_id)
        row.customer_name = customer_name
        row.email = email
        row.phone = phone
        row.ship_street = shipping_address.street
        row.ship_city = shipping_address.city
        row.ship_state = shipping_address.state
        row.ship_zip = shipping_address.zip
        db.session.commit()

    def delete_order(self, order_id: int) -> None:
        self._require_admin("delete orders")
        row = self._order_row(order_id)
        blob_ids = [b for b in (row.photo_blob_id, row.signature_blob_id) if b is not None]
        db.session.delete(row)
        db.session.flush()
        if blob_ids:
            models.Blob.query.filter(models.Blob.id.in_(blob_ids)).delete(synchronize_session=False)
        db.session.commit()
        logger.info("order %s deleted by %s", order_id, self.caller)

    def add_or_update_tracking_number(self, order_id: int, tracking_number: str) -> None:
        self._require_admin("set tracking numbers")
        row = self._order_row(order_id)
        row.tracking_number = tracking_number.strip() or None
        db.session.commit()

    # --- bans ---
    def get_banned_users(self) -> List[str]:
        self._require_admin("list banned users")
        return [b.principal for b in models.Ban.query.order_by(models.Ban.banned_at.asc()).all()]

    def is_banned_user(self, user: str) -> bool:
        caller = self._require_user("check bans")
        if caller != user and self._role_of(caller) != UserRole.admin:
            raise BackendTrap("Unauthorized: Can only check your own ban status")
        return db.session.get(models.Ban, user) is not None

    def ban_user(self, user: str) -> None:
        caller = self._require_admin("ban users")
        if user == caller:
            raise BackendTrap("Cannot ban yourself")
        if db.session.get(models.Ban, user) is None:
            db.session.add(models.Ban(principal=user, banned_by=caller))
            db.session.commit()
            logger.info("%s banned %s", caller, user)

    def unban_user(self, user: str) -> None:
        caller = self._require_admin("unban users")
        row = db.session.get(models.Ban, user)
        if row is not None:
            db.session.delete(row)
            db.session.commit()
            logger.info("%s unbanned %s", caller, user)

    # --- blobs ---
    def get_blob(self, blob_id: int) -> Optional[StoredBlob]:
        caller = self._require_user("view uploads")
        row = db.session.get(models.Blob, int(blob_id))
        if row is None:
            return None
        if self._role_of(caller) != UserRole.admin:
            owned = models.Order.query.filter(
                models.Order.owner == caller,
                or_(models.Order.photo_blob_id == row.id, models.Order.signature_blob_id == row.id),
            ).first()
            if owned is None:
                raise BackendTrap("Unauthorized: Can only view your own uploads")
        return StoredBlob(content_type=row.content_type, data=row.data)

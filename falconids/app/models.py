from __future__ import annotations

from datetime import datetime
from sqlalchemy import Index

from falconids.app.extensions import db


class Account(db.Model):
    """Identity provider record. The principal is what the rest of the app sees."""

    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    principal = db.Column(db.String(64), nullable=False, unique=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class RoleAssignment(db.Model):
    __tablename__ = "user_roles"

    principal = db.Column(db.String(64), primary_key=True)
    role = db.Column(db.String(16), nullable=False, default="user")  # admin | user | guest
    assigned_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class Profile(db.Model):
    __tablename__ = "user_profiles"

    principal = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class Blob(db.Model):
    __tablename__ = "blobs"

    id = db.Column(db.Integer, primary_key=True)
    content_type = db.Column(db.String(100), nullable=False, default="application/octet-stream")
    data = db.Column(db.LargeBinary, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    owner = db.Column(db.String(64), nullable=False, index=True)

    customer_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)

    ship_street = db.Column(db.String(255), nullable=False)
    ship_city = db.Column(db.String(100), nullable=False)
    ship_state = db.Column(db.String(50), nullable=False)
    ship_zip = db.Column(db.String(20), nullable=False)

    # ID card details
    id_name = db.Column(db.String(200), nullable=False)
    id_date_of_birth = db.Column(db.String(20), nullable=False)
    id_sex = db.Column(db.String(20), nullable=False)
    id_height = db.Column(db.String(20), nullable=False)
    id_weight = db.Column(db.String(20), nullable=False, default="")
    id_hair_color = db.Column(db.String(50), nullable=False)
    id_eye_color = db.Column(db.String(50), nullable=False)
    id_street = db.Column(db.String(255), nullable=False)
    id_city = db.Column(db.String(100), nullable=False)
    id_state = db.Column(db.String(50), nullable=False)
    id_zip = db.Column(db.String(20), nullable=False)
    photo_blob_id = db.Column(db.Integer, db.ForeignKey("blobs.id"), nullable=True)
    signature_blob_id = db.Column(db.Integer, db.ForeignKey("blobs.id"), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending")
    payment_contact_status = db.Column(db.String(32), nullable=False, default="notContacted")
    contact_notes = db.Column(db.Text, nullable=False, default="")
    tracking_number = db.Column(db.String(100), nullable=True)
    created_time = db.Column(db.BigInteger, nullable=False)  # ns since epoch

    __table_args__ = (
        Index("ix_orders_owner_created", "owner", "created_time"),
    )


class Ban(db.Model):
    __tablename__ = "bans"

    principal = db.Column(db.String(64), primary_key=True)
    banned_by = db.Column(db.String(64), nullable=True)
    banned_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class AdminInvitation(db.Model):
    """Pending offer of the admin role to a principal."""

    __tablename__ = "admin_invitations"

    principal = db.Column(db.String(64), primary_key=True)
    invited_by = db.Column(db.String(64), nullable=False)
    invited_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

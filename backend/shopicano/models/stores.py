from __future__ import annotations

from ..extensions import db
from ..identifiers import new_uuid
from ..time_utils import to_utc_z, utcnow

STORE_PENDING = "pending"
STORE_ACTIVE = "active"
STORE_SUSPENDED = "suspended"

STORE_STATUSES = (STORE_PENDING, STORE_ACTIVE, STORE_SUSPENDED)


class Store(db.Model):
    """
    Tenant root: products, categories, coupons, methods, orders and staff
    all belong to exactly one store.

    New stores start `pending`; staff endpoints only open once a platform
    admin marks the store `active`.
    """
    __tablename__ = "stores"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(120), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)

    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    country = db.Column(db.String(120), nullable=False)
    postcode = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)

    logo_image = db.Column(db.String(512), nullable=True)
    cover_image = db.Column(db.String(512), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=STORE_PENDING, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Store id={self.id} name={self.name!r} status={self.status}>"

    @property
    def is_active(self) -> bool:
        return self.status == STORE_ACTIVE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "postcode": self.postcode,
            "email": self.email,
            "phone": self.phone,
            "logo_image": self.logo_image,
            "cover_image": self.cover_image,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Staff(db.Model):
    """
    Store membership. A user can be staff of at most one store, so user_id
    is the primary key.
    """
    __tablename__ = "staffs"

    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), primary_key=True)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    permission_id = db.Column(db.String(36), db.ForeignKey("user_permissions.id"), nullable=False)
    is_creator = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    store = db.relationship("Store", backref=db.backref("staffs", lazy=True))
    user = db.relationship("User")
    permission_group = db.relationship("UserPermission")


class PaymentMethod(db.Model):
    """
    Store-defined way to pay. `processing_fee` is an absolute amount when
    `is_flat`, otherwise a percentage of sub total + shipping.
    """
    __tablename__ = "payment_methods"
    __table_args__ = (
        db.UniqueConstraint("store_id", "name", name="uq_payment_methods_store_name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    processing_fee = db.Column(db.Integer, nullable=False, default=0)
    is_flat = db.Column(db.Boolean, nullable=False, default=True)
    is_offline_payment = db.Column(db.Boolean, nullable=False, default=False)
    is_published = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "processing_fee": self.processing_fee,
            "is_flat": self.is_flat,
            "is_offline_payment": self.is_offline_payment,
            "is_published": self.is_published,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ShippingMethod(db.Model):
    """Store-defined delivery option with a flat delivery charge."""
    __tablename__ = "shipping_methods"
    __table_args__ = (
        db.UniqueConstraint("store_id", "name", name="uq_shipping_methods_store_name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    delivery_charge = db.Column(db.Integer, nullable=False, default=0)
    approximate_delivery_time = db.Column(db.Integer, nullable=False, default=0)  # days
    is_published = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "delivery_charge": self.delivery_charge,
            "approximate_delivery_time": self.approximate_delivery_time,
            "is_published": self.is_published,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

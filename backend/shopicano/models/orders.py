from __future__ import annotations

from ..extensions import db
from ..identifiers import new_order_hash, new_uuid
from ..time_utils import to_utc_z, utcnow

ORDER_PENDING = "pending"
ORDER_CONFIRMED = "confirmed"
ORDER_SHIPPING = "shipping"
ORDER_DELIVERED = "delivered"
ORDER_CANCELLED = "cancelled"

ORDER_STATUSES = (ORDER_PENDING, ORDER_CONFIRMED, ORDER_SHIPPING, ORDER_DELIVERED, ORDER_CANCELLED)

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"
PAYMENT_REVERTED = "reverted"

PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_COMPLETED, PAYMENT_FAILED, PAYMENT_REVERTED)


class Order(db.Model):
    """
    Customer order placed against a single store.

    Monetary columns are in the smallest currency unit:
    grand_total = sub_total + shipping_charge + payment_processing_fee - discount
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_store_created", "store_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    hash = db.Column(db.String(16), nullable=False, unique=True, default=new_order_hash)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    billing_address_id = db.Column(db.String(36), db.ForeignKey("addresses.id"), nullable=False)
    shipping_address_id = db.Column(db.String(36), db.ForeignKey("addresses.id"), nullable=True)
    payment_method_id = db.Column(db.String(36), db.ForeignKey("payment_methods.id"), nullable=False)
    shipping_method_id = db.Column(db.String(36), db.ForeignKey("shipping_methods.id"), nullable=True)
    coupon_id = db.Column(db.String(36), db.ForeignKey("coupons.id"), nullable=True, index=True)

    status = db.Column(db.String(16), nullable=False, default=ORDER_PENDING, index=True)
    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_PENDING, index=True)

    sub_total = db.Column(db.Integer, nullable=False, default=0)
    shipping_charge = db.Column(db.Integer, nullable=False, default=0)
    payment_processing_fee = db.Column(db.Integer, nullable=False, default=0)
    discount = db.Column(db.Integer, nullable=False, default=0)
    grand_total = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = db.relationship("OrderedItem", backref="order", lazy=True, cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Order id={self.id} hash={self.hash} store_id={self.store_id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "hash": self.hash,
            "store_id": self.store_id,
            "user_id": self.user_id,
            "billing_address_id": self.billing_address_id,
            "shipping_address_id": self.shipping_address_id,
            "payment_method_id": self.payment_method_id,
            "shipping_method_id": self.shipping_method_id,
            "coupon_id": self.coupon_id,
            "status": self.status,
            "payment_status": self.payment_status,
            "sub_total": self.sub_total,
            "shipping_charge": self.shipping_charge,
            "payment_processing_fee": self.payment_processing_fee,
            "discount": self.discount,
            "grand_total": self.grand_total,
            "items": [i.to_dict() for i in self.items],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class OrderedItem(db.Model):
    """Order line; price is captured at order time."""
    __tablename__ = "ordered_items"

    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), primary_key=True)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), primary_key=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Integer, nullable=False)
    sub_total = db.Column(db.Integer, nullable=False)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "price": self.price,
            "sub_total": self.sub_total,
        }

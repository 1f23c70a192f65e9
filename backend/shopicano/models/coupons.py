from __future__ import annotations

from ..extensions import db
from ..identifiers import new_uuid
from ..time_utils import to_utc_z, utcnow

DISCOUNT_PRODUCT = "product"
DISCOUNT_SHIPPING = "shipping"
DISCOUNT_TOTAL = "total"

DISCOUNT_TYPES = (DISCOUNT_PRODUCT, DISCOUNT_SHIPPING, DISCOUNT_TOTAL)


class Coupon(db.Model):
    """
    Store-issued discount code. Codes are unique within a store.

    discount_type selects the base the discount applies to:
    - product:  order sub total
    - shipping: shipping charge
    - total:    sub total + shipping + processing fee

    `discount_amount` is absolute when `is_flat_discount`, otherwise a
    percentage of the base capped by `max_discount` (0 = no cap).
    `max_usage` of 0 means unlimited.
    """
    __tablename__ = "coupons"
    __table_args__ = (
        db.UniqueConstraint("store_id", "code", name="uq_coupons_store_code"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    code = db.Column(db.String(32), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    discount_amount = db.Column(db.Integer, nullable=False)
    is_flat_discount = db.Column(db.Boolean, nullable=False, default=True)
    max_discount = db.Column(db.Integer, nullable=False, default=0)
    max_usage = db.Column(db.Integer, nullable=False, default=0)
    discount_type = db.Column(db.String(16), nullable=False, default=DISCOUNT_PRODUCT)

    start_at = db.Column(db.DateTime(timezone=True), nullable=False)
    end_at = db.Column(db.DateTime(timezone=True), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Coupon id={self.id} code={self.code!r} store_id={self.store_id}>"

    def calculate_discount(self, base: int) -> int:
        if base <= 0:
            return 0
        if self.is_flat_discount:
            discount = self.discount_amount
        else:
            discount = base * self.discount_amount // 100
            if self.max_discount > 0:
                discount = min(discount, self.max_discount)
        return min(discount, base)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "code": self.code,
            "is_active": self.is_active,
            "discount_amount": self.discount_amount,
            "is_flat_discount": self.is_flat_discount,
            "max_discount": self.max_discount,
            "max_usage": self.max_usage,
            "discount_type": self.discount_type,
            "start_at": to_utc_z(self.start_at),
            "end_at": to_utc_z(self.end_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

from __future__ import annotations

from ..errors import NotFoundError
from ..models import Coupon, Order
from ..models.orders import ORDER_CANCELLED
from .base import Repository


class CouponRepository(Repository):
    """Coupons are store-scoped; every read outside the store is a miss."""

    def create(self, coupon: Coupon) -> Coupon:
        return self._save(coupon)

    def get_as_store_staff(self, store_id: str, coupon_id: str) -> Coupon:
        coupon = (
            self.session.query(Coupon)
            .filter(Coupon.id == coupon_id, Coupon.store_id == store_id)
            .first()
        )
        if coupon is None:
            raise NotFoundError("Coupon not found")
        return coupon

    def get_by_code(self, store_id: str, code: str) -> Coupon:
        coupon = (
            self.session.query(Coupon)
            .filter(Coupon.store_id == store_id, Coupon.code == code)
            .first()
        )
        if coupon is None:
            raise NotFoundError("Coupon not found")
        return coupon

    def update(self, coupon: Coupon) -> Coupon:
        self._commit()
        return coupon

    def delete(self, store_id: str, coupon_id: str) -> None:
        coupon = self.get_as_store_staff(store_id, coupon_id)
        self._refuse_if_referenced(
            self.session.query(Order).filter(Order.coupon_id == coupon.id),
            "Coupon has been redeemed",
        )
        self.session.delete(coupon)
        self._commit()

    def list_as_store_staff(self, store_id: str, offset: int, limit: int) -> list[Coupon]:
        return (
            self.session.query(Coupon)
            .filter(Coupon.store_id == store_id)
            .order_by(Coupon.created_at.desc(), Coupon.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def search_as_store_staff(self, query: str, store_id: str, offset: int, limit: int) -> list[Coupon]:
        return (
            self.session.query(Coupon)
            .filter(Coupon.store_id == store_id, Coupon.code.ilike(f"%{query}%"))
            .order_by(Coupon.created_at.desc(), Coupon.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def usage_count(self, coupon_id: str) -> int:
        """Orders that redeemed the coupon; cancelled orders give the use back."""
        return (
            self.session.query(Order)
            .filter(Order.coupon_id == coupon_id, Order.status != ORDER_CANCELLED)
            .count()
        )

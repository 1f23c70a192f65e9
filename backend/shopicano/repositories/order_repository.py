"""
Order persistence and the reporting queries built on top of it.

Order creation is the one multi-table write in the catalog: the order row,
its items and the stock decrement for every product share a single commit.
Stock is decremented with a guarded UPDATE (stock >= quantity) so two
concurrent checkouts can never oversell.

Reporting windows are half-open: created_at >= start AND created_at < end.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError, NotFoundError
from ..identifiers import new_order_hash
from ..models import Order, OrderedItem, Product
from ..models.orders import (
    ORDER_CANCELLED,
    ORDER_DELIVERED,
    ORDER_STATUSES,
    PAYMENT_COMPLETED,
    PAYMENT_STATUSES,
)
from ..time_utils import to_utc_z, utcnow
from .base import Repository

FINAL_ORDER_STATUSES = {ORDER_DELIVERED, ORDER_CANCELLED}
ORDER_HASH_ATTEMPTS = 5
ORDER_HASH_MAX_BYTES = 8


@dataclass
class Summary:
    """Aggregate over a store's orders; `time` is the bucket start, if any."""
    time: datetime | None
    total_orders: int
    total_products: int
    total_earnings: int

    def to_dict(self) -> dict:
        return {
            "time": to_utc_z(self.time),
            "total_orders": self.total_orders,
            "total_products": self.total_products,
            "total_earnings": self.total_earnings,
        }


class OrderRepository(Repository):
    def create(self, order: Order, items: list[OrderedItem]) -> Order:
        """Persist order + items and take stock, all or nothing."""
        try:
            for item in items:
                updated = (
                    self.session.query(Product)
                    .filter(Product.id == item.product_id, Product.stock >= item.quantity)
                    .update(
                        {Product.stock: Product.stock - item.quantity},
                        synchronize_session=False,
                    )
                )
                if not updated:
                    raise ConflictError(f"Insufficient stock for product {item.product_id}")

            order.hash = self._unused_order_hash()
            self.session.add(order)
            self.session.flush()
            for item in items:
                item.order_id = order.id
                self.session.add(item)
        except (ConflictError, SQLAlchemyError):
            self.session.rollback()
            raise

        self._commit()
        return order

    def _unused_order_hash(self) -> str:
        """A reference no stored order carries; falls back to the full column width."""
        for _ in range(ORDER_HASH_ATTEMPTS):
            candidate = new_order_hash()
            taken = self.session.query(Order).filter(Order.hash == candidate).exists()
            if not self.session.query(taken).scalar():
                return candidate
        return new_order_hash(ORDER_HASH_MAX_BYTES)

    def _customer_query(self, user_id: str):
        return self.session.query(Order).filter(Order.user_id == user_id)

    def _store_query(self, store_id: str):
        return self.session.query(Order).filter(Order.store_id == store_id)

    def get(self, user_id: str, order_id: str) -> Order:
        order = self._customer_query(user_id).filter(Order.id == order_id).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def get_as_store_staff(self, store_id: str, order_id: str) -> Order:
        order = self._store_query(store_id).filter(Order.id == order_id).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def list(self, user_id: str, offset: int, limit: int) -> list[Order]:
        return (
            self._customer_query(user_id)
            .order_by(Order.created_at.desc(), Order.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def list_as_store_staff(self, store_id: str, offset: int, limit: int) -> list[Order]:
        return (
            self._store_query(store_id)
            .order_by(Order.created_at.desc(), Order.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def update_status(self, store_id: str, order_id: str, status: str) -> Order:
        """
        Move an order through its workflow.

        delivered and cancelled are final. Cancelling puts the ordered
        quantities back on the shelf in the same commit.
        """
        order = self.get_as_store_staff(store_id, order_id)
        if order.status == status:
            return order
        if order.status in FINAL_ORDER_STATUSES:
            raise ConflictError(f"Order is already {order.status}")

        if status == ORDER_CANCELLED:
            for item in order.items:
                self.session.query(Product).filter(Product.id == item.product_id).update(
                    {Product.stock: Product.stock + item.quantity},
                    synchronize_session=False,
                )

        order.status = status
        order.updated_at = utcnow()
        self._commit()
        return order

    def update_payment_status(self, store_id: str, order_id: str, payment_status: str) -> Order:
        order = self.get_as_store_staff(store_id, order_id)
        order.payment_status = payment_status
        order.updated_at = utcnow()
        self._commit()
        return order

    # -- reporting --

    def _window(self, query, start: datetime | None, end: datetime | None):
        if start is not None:
            query = query.filter(Order.created_at >= start)
        if end is not None:
            query = query.filter(Order.created_at < end)
        return query

    def _summary(self, store_id: str, start: datetime | None, end: datetime | None) -> Summary:
        total_orders = self._window(
            self.session.query(func.count(Order.id)).filter(Order.store_id == store_id),
            start, end,
        ).scalar()

        total_products = self._window(
            self.session.query(func.coalesce(func.sum(OrderedItem.quantity), 0))
            .join(Order, Order.id == OrderedItem.order_id)
            .filter(Order.store_id == store_id),
            start, end,
        ).scalar()

        total_earnings = self._window(
            self.session.query(func.coalesce(func.sum(Order.grand_total), 0))
            .filter(Order.store_id == store_id, Order.payment_status == PAYMENT_COMPLETED),
            start, end,
        ).scalar()

        return Summary(
            time=start,
            total_orders=int(total_orders or 0),
            total_products=int(total_products or 0),
            total_earnings=int(total_earnings or 0),
        )

    def store_summary(self, store_id: str) -> Summary:
        """All-time summary for a store."""
        return self._summary(store_id, None, None)

    def store_summary_by_time(self, store_id: str, start: datetime, end: datetime) -> Summary:
        return self._summary(store_id, start, end)

    def count_by_status(self, store_id: str, start: datetime, end: datetime) -> dict[str, int]:
        """Order counts per workflow status; every status present, zero-filled."""
        rows = self._window(
            self.session.query(Order.status, func.count(Order.id))
            .filter(Order.store_id == store_id),
            start, end,
        ).group_by(Order.status).all()

        counts = {status: 0 for status in ORDER_STATUSES}
        for status, count in rows:
            if status in counts:
                counts[status] = int(count)
        return counts

    def earnings_by_status(self, store_id: str, start: datetime, end: datetime) -> dict[str, int]:
        """Grand totals per payment status; every status present, zero-filled."""
        rows = self._window(
            self.session.query(Order.payment_status, func.coalesce(func.sum(Order.grand_total), 0))
            .filter(Order.store_id == store_id),
            start, end,
        ).group_by(Order.payment_status).all()

        earnings = {status: 0 for status in PAYMENT_STATUSES}
        for status, total in rows:
            if status in earnings:
                earnings[status] = int(total)
        return earnings

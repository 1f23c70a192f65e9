"""Store-owned payment and shipping methods."""
from __future__ import annotations

from ..errors import NotFoundError
from ..models import Order, PaymentMethod, ShippingMethod, Store
from ..models.stores import STORE_ACTIVE
from .base import Repository


class _StoreMethodRepository(Repository):
    model = None
    order_column = None
    not_found_message = "Method not found"

    def create(self, method):
        return self._save(method)

    def list(self, store_id: str) -> list:
        return (
            self.session.query(self.model)
            .filter(self.model.store_id == store_id)
            .order_by(self.model.name.asc(), self.model.id.asc())
            .all()
        )

    def list_public(self, store_id: str) -> list:
        return (
            self.session.query(self.model)
            .join(Store, Store.id == self.model.store_id)
            .filter(
                self.model.store_id == store_id,
                self.model.is_published.is_(True),
                Store.status == STORE_ACTIVE,
            )
            .order_by(self.model.name.asc(), self.model.id.asc())
            .all()
        )

    def get(self, store_id: str, method_id: str):
        method = (
            self.session.query(self.model)
            .filter(self.model.id == method_id, self.model.store_id == store_id)
            .first()
        )
        if method is None:
            raise NotFoundError(self.not_found_message)
        return method

    def delete(self, store_id: str, method_id: str) -> None:
        method = self.get(store_id, method_id)
        self._refuse_if_referenced(
            self.session.query(Order).filter(self.order_column == method.id),
            "Method is used by an order",
        )
        self.session.delete(method)
        self._commit()


class PaymentMethodRepository(_StoreMethodRepository):
    model = PaymentMethod
    order_column = Order.payment_method_id
    not_found_message = "Payment method not found"


class ShippingMethodRepository(_StoreMethodRepository):
    model = ShippingMethod
    order_column = Order.shipping_method_id
    not_found_message = "Shipping method not found"

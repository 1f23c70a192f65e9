from __future__ import annotations

from sqlalchemy import or_

from ..errors import NotFoundError
from ..models import Address, Order
from .base import Repository


class AddressRepository(Repository):
    """Addresses are owned by a user; every lookup is scoped by user_id."""

    def create(self, address: Address) -> Address:
        return self._save(address)

    def list(self, user_id: str) -> list[Address]:
        return (
            self.session.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.created_at.desc(), Address.id.asc())
            .all()
        )

    def get(self, user_id: str, address_id: str) -> Address:
        address = (
            self.session.query(Address)
            .filter(Address.id == address_id, Address.user_id == user_id)
            .first()
        )
        if address is None:
            raise NotFoundError("Address not found")
        return address

    def delete(self, user_id: str, address_id: str) -> None:
        address = self.get(user_id, address_id)
        self._refuse_if_referenced(
            self.session.query(Order).filter(
                or_(Order.billing_address_id == address.id, Order.shipping_address_id == address.id)
            ),
            "Address is used by an order",
        )
        self.session.delete(address)
        self._commit()

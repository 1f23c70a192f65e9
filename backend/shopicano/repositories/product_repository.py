"""
Product persistence.

Two read shapes:
- staff view: the Product model itself (to_dict), scoped to the caller's store
- public view: ProductDetails, only for published products of active stores

Routes pick between them with an explicit is_store_staff() check.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func, or_

from ..errors import NotFoundError
from ..models import Category, OrderedItem, Product, ProductAttribute, Store
from ..models.stores import STORE_ACTIVE
from ..time_utils import to_utc_z
from .base import Repository


@dataclass
class ProductDetails:
    """Public product view: no stock-keeping internals, no download link."""
    id: str
    store_id: str
    store_name: str
    category_id: str | None
    category_name: str | None
    name: str
    description: str | None
    sku: str
    unit: str
    price: int
    stock: int
    is_shippable: bool
    is_digital: bool
    image: str | None
    additional_images: list[str]
    created_at: datetime
    updated_at: datetime
    attributes: list[dict] = field(default_factory=list)

    @classmethod
    def from_product(cls, p: Product) -> "ProductDetails":
        return cls(
            id=p.id,
            store_id=p.store_id,
            store_name=p.store.name,
            category_id=p.category_id,
            category_name=p.category.name if p.category else None,
            name=p.name,
            description=p.description,
            sku=p.sku,
            unit=p.unit,
            price=p.price,
            stock=p.stock,
            is_shippable=p.is_shippable,
            is_digital=p.is_digital,
            image=p.image,
            additional_images=p.image_list,
            created_at=p.created_at,
            updated_at=p.updated_at,
            attributes=[a.to_dict() for a in p.attributes],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "store_name": self.store_name,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "unit": self.unit,
            "price": self.price,
            "stock": self.stock,
            "is_shippable": self.is_shippable,
            "is_digital": self.is_digital,
            "image": self.image,
            "additional_images": self.additional_images,
            "attributes": self.attributes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProductRepository(Repository):
    def create(self, product: Product) -> Product:
        return self._save(product)

    def get(self, product_id: str) -> Product:
        """Any product by id, regardless of store or publication state."""
        p = self.session.query(Product).filter_by(id=product_id).first()
        if p is None:
            raise NotFoundError("Product not found")
        return p

    def _public_query(self):
        return (
            self.session.query(Product)
            .join(Store, Store.id == Product.store_id)
            .filter(Product.is_published.is_(True), Store.status == STORE_ACTIVE)
        )

    def get_details(self, product_id: str) -> ProductDetails:
        p = self._public_query().filter(Product.id == product_id).first()
        if p is None:
            raise NotFoundError("Product not found")
        return ProductDetails.from_product(p)

    def get_as_store_staff(self, store_id: str, product_id: str) -> Product:
        p = (
            self.session.query(Product)
            .filter(Product.id == product_id, Product.store_id == store_id)
            .first()
        )
        if p is None:
            raise NotFoundError("Product not found")
        return p

    def get_many(self, product_ids: list[str]) -> dict[str, Product]:
        if not product_ids:
            return {}
        products = self.session.query(Product).filter(Product.id.in_(product_ids)).all()
        return {p.id: p for p in products}

    def update(self, product: Product) -> Product:
        self._commit()
        return product

    def delete(self, store_id: str, product_id: str) -> None:
        p = self.get_as_store_staff(store_id, product_id)
        self._refuse_if_referenced(
            self.session.query(OrderedItem).filter(OrderedItem.product_id == p.id),
            "Product has been ordered",
        )
        self.session.delete(p)
        self._commit()

    def list(self, offset: int, limit: int) -> list[ProductDetails]:
        products = (
            self._public_query()
            .order_by(Product.name.asc(), Product.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [ProductDetails.from_product(p) for p in products]

    def list_as_store_staff(self, store_id: str, offset: int, limit: int) -> list[Product]:
        return (
            self.session.query(Product)
            .filter(Product.store_id == store_id)
            .order_by(Product.name.asc(), Product.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def search(self, query: str, offset: int, limit: int) -> list[ProductDetails]:
        pattern = f"%{query}%"
        products = (
            self._public_query()
            .outerjoin(Category, Category.id == Product.category_id)
            .filter(or_(Product.name.ilike(pattern), Category.name.ilike(pattern)))
            .order_by(Product.name.asc(), Product.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [ProductDetails.from_product(p) for p in products]

    def search_as_store_staff(self, query: str, store_id: str, offset: int, limit: int) -> list[Product]:
        pattern = f"%{query}%"
        return (
            self.session.query(Product)
            .filter(
                Product.store_id == store_id,
                or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)),
            )
            .order_by(Product.name.asc(), Product.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def add_attribute(self, attribute: ProductAttribute) -> ProductAttribute:
        """Insert, or replace the value already stored under (product_id, key)."""
        attribute = self.session.merge(attribute)
        self._commit()
        return attribute

    def remove_attribute(self, product_id: str, key: str) -> None:
        deleted = (
            self.session.query(ProductAttribute)
            .filter(ProductAttribute.product_id == product_id, ProductAttribute.key == key)
            .delete(synchronize_session=False)
        )
        self._commit()
        if not deleted:
            raise NotFoundError("Product attribute not found")

    def _stats_query(self):
        sold = func.coalesce(func.sum(OrderedItem.quantity), 0).label("number_of_sells")
        return (
            self.session.query(Product.id, Product.name, sold)
            .outerjoin(OrderedItem, OrderedItem.product_id == Product.id)
            .group_by(Product.id, Product.name)
            .order_by(sold.desc(), Product.name.asc())
        )

    def stats(self, offset: int, limit: int) -> list[dict]:
        """Best sellers among published products of active stores."""
        rows = (
            self._stats_query()
            .join(Store, Store.id == Product.store_id)
            .filter(Product.is_published.is_(True), Store.status == STORE_ACTIVE)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [{"id": r.id, "name": r.name, "number_of_sells": int(r.number_of_sells)} for r in rows]

    def stats_as_store_staff(self, store_id: str, offset: int, limit: int) -> list[dict]:
        rows = (
            self._stats_query()
            .filter(Product.store_id == store_id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [{"id": r.id, "name": r.name, "number_of_sells": int(r.number_of_sells)} for r in rows]

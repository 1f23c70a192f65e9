from __future__ import annotations

from sqlalchemy import func

from ..errors import NotFoundError
from ..models import Category, Product, Store
from ..models.stores import STORE_ACTIVE
from .base import Repository


class CategoryRepository(Repository):
    """
    Public reads only see categories of active stores. *_as_store_staff
    reads are scoped to one store and answer NotFoundError for anything
    outside it.
    """

    def create(self, category: Category) -> Category:
        return self._save(category)

    def _public_query(self):
        return (
            self.session.query(Category)
            .join(Store, Store.id == Category.store_id)
            .filter(Store.status == STORE_ACTIVE)
        )

    def get_details(self, category_id: str) -> Category:
        category = self._public_query().filter(Category.id == category_id).first()
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def get_as_store_staff(self, store_id: str, category_id: str) -> Category:
        category = (
            self.session.query(Category)
            .filter(Category.id == category_id, Category.store_id == store_id)
            .first()
        )
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def update(self, category: Category) -> Category:
        self._commit()
        return category

    def delete(self, store_id: str, category_id: str) -> None:
        category = self.get_as_store_staff(store_id, category_id)
        # Products keep existing without a category
        self.session.query(Product).filter(Product.category_id == category.id).update(
            {Product.category_id: None}, synchronize_session=False
        )
        self.session.delete(category)
        self._commit()

    def list(self, offset: int, limit: int) -> list[Category]:
        return (
            self._public_query()
            .order_by(Category.name.asc(), Category.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def list_as_store_staff(self, store_id: str, offset: int, limit: int) -> list[Category]:
        return (
            self.session.query(Category)
            .filter(Category.store_id == store_id)
            .order_by(Category.name.asc(), Category.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def search(self, query: str, offset: int, limit: int) -> list[Category]:
        return (
            self._public_query()
            .filter(Category.name.ilike(f"%{query}%"))
            .order_by(Category.name.asc(), Category.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def search_as_store_staff(self, query: str, store_id: str, offset: int, limit: int) -> list[Category]:
        return (
            self.session.query(Category)
            .filter(Category.store_id == store_id, Category.name.ilike(f"%{query}%"))
            .order_by(Category.name.asc(), Category.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def _stats_query(self, product_filter):
        product_count = func.count(Product.id).label("number_of_products")
        return (
            self.session.query(Category.id, Category.name, product_count)
            .outerjoin(Product, (Product.category_id == Category.id) & product_filter)
            .group_by(Category.id, Category.name)
            .order_by(product_count.desc(), Category.name.asc())
        )

    def stats(self, offset: int, limit: int) -> list[dict]:
        """Categories of active stores ranked by published product count."""
        rows = (
            self._stats_query(Product.is_published.is_(True))
            .join(Store, Store.id == Category.store_id)
            .filter(Store.status == STORE_ACTIVE)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [{"id": r.id, "name": r.name, "number_of_products": int(r.number_of_products)} for r in rows]

    def stats_as_store_staff(self, store_id: str, offset: int, limit: int) -> list[dict]:
        rows = (
            self._stats_query(Product.store_id == store_id)
            .filter(Category.store_id == store_id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [{"id": r.id, "name": r.name, "number_of_products": int(r.number_of_products)} for r in rows]

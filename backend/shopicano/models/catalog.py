from __future__ import annotations

from ..extensions import db
from ..identifiers import new_uuid
from ..time_utils import to_utc_z, utcnow


class Category(db.Model):
    """Store-scoped product grouping. Names are unique within a store."""
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("store_id", "name", name="uq_categories_store_name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    image = db.Column(db.String(512), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    store = db.relationship("Store", backref=db.backref("categories", lazy=True))

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r} store_id={self.store_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """
    Product master data.

    SKUs are unique within a store: UniqueConstraint("store_id", "sku").
    The same SKU may exist in two different stores.

    `additional_images` is stored comma-joined; `image_list` splits it back.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("store_id", "sku", name="uq_products_store_sku"),
        db.Index("ix_products_store_name", "store_id", "name"),
        db.Index("ix_products_store_published", "store_id", "is_published"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    category_id = db.Column(db.String(36), db.ForeignKey("categories.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(64), nullable=False)
    unit = db.Column(db.String(32), nullable=False)

    # Smallest currency unit
    price = db.Column(db.Integer, nullable=False, default=0)
    stock = db.Column(db.Integer, nullable=False, default=0)

    is_shippable = db.Column(db.Boolean, nullable=False, default=False)
    is_digital = db.Column(db.Boolean, nullable=False, default=False)
    digital_download_link = db.Column(db.String(512), nullable=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False)

    image = db.Column(db.String(512), nullable=True)
    additional_images = db.Column(db.Text, nullable=False, default="")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    store = db.relationship("Store", backref=db.backref("products", lazy=True))
    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    attributes = db.relationship(
        "ProductAttribute",
        backref="product",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ProductAttribute.key",
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} store_id={self.store_id}>"

    @property
    def image_list(self) -> list[str]:
        if not self.additional_images:
            return []
        return [i for i in self.additional_images.split(",") if i]

    def to_dict(self) -> dict:
        """Staff view: every column, including unpublished state and download link."""
        return {
            "id": self.id,
            "store_id": self.store_id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "unit": self.unit,
            "price": self.price,
            "stock": self.stock,
            "is_shippable": self.is_shippable,
            "is_digital": self.is_digital,
            "digital_download_link": self.digital_download_link,
            "is_published": self.is_published,
            "image": self.image,
            "additional_images": self.image_list,
            "attributes": [a.to_dict() for a in self.attributes],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProductAttribute(db.Model):
    """Free-form key/value pair; one value per (product, key)."""
    __tablename__ = "product_attributes"

    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), primary_key=True)
    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.String(255), nullable=False)

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value}

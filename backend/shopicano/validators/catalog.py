"""
Category and product payloads.

An empty-string category_id means "no category": it comes out as None,
never as "".
"""
from __future__ import annotations

from dataclasses import dataclass, field

from .common import MAX_AMOUNT, PayloadReader, collect_patch

MAX_STOCK = 10_000_000


@dataclass
class CategoryCreateRequest:
    name: str
    description: str | None = None
    image: str | None = None


@dataclass
class ProductCreateRequest:
    name: str
    sku: str
    unit: str
    price: int
    stock: int
    category_id: str | None = None
    description: str | None = None
    is_shippable: bool = False
    is_digital: bool = False
    digital_download_link: str | None = None
    is_published: bool = False
    image: str | None = None
    additional_images: list[str] = field(default_factory=list)


@dataclass
class ProductAttributeRequest:
    key: str
    value: str


def validate_category_create(payload) -> CategoryCreateRequest:
    r = PayloadReader(payload)
    req = CategoryCreateRequest(
        name=r.string("name", required=True, max_length=120),
        description=r.string("description", max_length=5000),
        image=r.string("image", max_length=512),
    )
    r.finish()
    return req


def validate_category_update(payload) -> dict:
    r = PayloadReader(payload)
    patch = collect_patch(r, {
        "name": lambda: r.string("name", required=True, max_length=120),
        "description": lambda: r.string("description", max_length=5000),
        "image": lambda: r.string("image", max_length=512),
    })
    r.finish()
    return patch


def _category_id(r: PayloadReader) -> str | None:
    # string() already maps "" and "   " to None
    return r.string("category_id", max_length=36)


def validate_product_create(payload) -> ProductCreateRequest:
    r = PayloadReader(payload)
    req = ProductCreateRequest(
        name=r.string("name", required=True, max_length=255),
        sku=r.string("sku", required=True, max_length=64),
        unit=r.string("unit", required=True, max_length=32),
        price=r.integer("price", required=True, min_value=0, max_value=MAX_AMOUNT),
        stock=r.integer("stock", required=True, min_value=0, max_value=MAX_STOCK),
        category_id=_category_id(r),
        description=r.string("description", max_length=10000),
        is_shippable=bool(r.boolean("is_shippable")),
        is_digital=bool(r.boolean("is_digital")),
        digital_download_link=r.string("digital_download_link", max_length=512),
        is_published=bool(r.boolean("is_published")),
        image=r.string("image", max_length=512),
        additional_images=r.string_list("additional_images"),
    )
    if req.is_digital and not req.digital_download_link and "digital_download_link" not in r.errors:
        r.error("digital_download_link", "digital_download_link is required for digital products")
    r.finish()
    return req


def validate_product_update(payload) -> dict:
    r = PayloadReader(payload)
    patch = collect_patch(r, {
        "name": lambda: r.string("name", required=True, max_length=255),
        "sku": lambda: r.string("sku", required=True, max_length=64),
        "unit": lambda: r.string("unit", required=True, max_length=32),
        "price": lambda: r.integer("price", required=True, min_value=0, max_value=MAX_AMOUNT),
        "stock": lambda: r.integer("stock", required=True, min_value=0, max_value=MAX_STOCK),
        "category_id": lambda: _category_id(r),
        "description": lambda: r.string("description", max_length=10000),
        "is_shippable": lambda: r.boolean("is_shippable", required=True),
        "is_digital": lambda: r.boolean("is_digital", required=True),
        "digital_download_link": lambda: r.string("digital_download_link", max_length=512),
        "is_published": lambda: r.boolean("is_published", required=True),
        "image": lambda: r.string("image", max_length=512),
        "additional_images": lambda: r.string_list("additional_images"),
    })
    r.finish()
    return patch


def validate_product_attribute(payload) -> ProductAttributeRequest:
    r = PayloadReader(payload)
    req = ProductAttributeRequest(
        key=r.string("key", required=True, max_length=64),
        value=r.string("value", required=True, max_length=255),
    )
    r.finish()
    return req

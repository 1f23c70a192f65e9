# Overview: Flask API routes for products and their attributes; public and store-staff views.

# backend/shopicano/routes/products.py
"""
Product routes.

Reads run through @might_be_store_staff:
- staff of an active store see every product of their store (staff view,
  unpublished ones and download links included)
- everyone else sees published products of active stores (ProductDetails)

Writes require the store's manage_products permission and are scoped to
the caller's store; another store's product id answers 404.
"""
from flask import Blueprint, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import is_store_staff, might_be_store_staff, require_store_permission, require_store_staff
from ..errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..models import Product, ProductAttribute
from ..permissions import MANAGE_PRODUCTS
from ..response import conflict, created, database_query_failed, invalid_data, no_content, not_found, ok, write_failed
from ..validators import parse_pagination
from ..validators.catalog import validate_product_attribute, validate_product_create, validate_product_update

products_bp = Blueprint("products", __name__, url_prefix="/v1/products")


def _check_digital(product: Product) -> None:
    if product.is_digital and not product.digital_download_link:
        raise ValidationError({
            "digital_download_link": ["digital_download_link is required for digital products"],
        })


@products_bp.post("/")
@require_store_staff
@require_store_permission(MANAGE_PRODUCTS)
def create_product():
    try:
        req = validate_product_create(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.PRODUCT_CREATION_DATA_INVALID, e)

    repos = get_repositories()
    if req.category_id is not None:
        try:
            repos.categories.get_as_store_staff(g.store.store_id, req.category_id)
        except NotFoundError:
            return not_found(ErrorCode.CATEGORY_NOT_FOUND, "Category not found")
        except SQLAlchemyError as e:
            return database_query_failed(e, "Failed to get category")

    product = Product(
        store_id=g.store.store_id,
        category_id=req.category_id,
        name=req.name,
        description=req.description,
        sku=req.sku,
        unit=req.unit,
        price=req.price,
        stock=req.stock,
        is_shippable=req.is_shippable,
        is_digital=req.is_digital,
        digital_download_link=req.digital_download_link,
        is_published=req.is_published,
        image=req.image,
        additional_images=",".join(req.additional_images),
    )
    try:
        repos.products.create(product)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.PRODUCT_ALREADY_EXISTS, "Failed to create product")
    return created(product.to_dict())


@products_bp.get("/")
@might_be_store_staff
def list_products():
    """
    Query params:
    - page, limit: pagination (defaults 1 / 10)
    - query: search by product name (public: also category name; staff: also SKU)
    """
    p = parse_pagination(request.args)
    repo = get_repositories().products
    try:
        if is_store_staff():
            if p.query:
                products = repo.search_as_store_staff(p.query, g.store.store_id, p.offset, p.limit)
            else:
                products = repo.list_as_store_staff(g.store.store_id, p.offset, p.limit)
        elif p.query:
            products = repo.search(p.query, p.offset, p.limit)
        else:
            products = repo.list(p.offset, p.limit)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list products")
    return ok([x.to_dict() for x in products])


@products_bp.get("/<product_id>/")
@might_be_store_staff
def get_product(product_id: str):
    repo = get_repositories().products
    try:
        if is_store_staff():
            product = repo.get_as_store_staff(g.store.store_id, product_id)
        else:
            product = repo.get_details(product_id)
    except NotFoundError:
        return not_found(ErrorCode.PRODUCT_NOT_FOUND, "Product not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get product")
    return ok(product.to_dict())


@products_bp.patch("/<product_id>/")
@require_store_staff
@require_store_permission(MANAGE_PRODUCTS)
def update_product(product_id: str):
    try:
        patch = validate_product_update(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.PRODUCT_CREATION_DATA_INVALID, e)

    repos = get_repositories()
    try:
        product = repos.products.get_as_store_staff(g.store.store_id, product_id)
    except NotFoundError:
        return not_found(ErrorCode.PRODUCT_NOT_FOUND, "Product not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get product")

    if patch.get("category_id") is not None:
        try:
            repos.categories.get_as_store_staff(g.store.store_id, patch["category_id"])
        except NotFoundError:
            return not_found(ErrorCode.CATEGORY_NOT_FOUND, "Category not found")
        except SQLAlchemyError as e:
            return database_query_failed(e, "Failed to get category")

    if "additional_images" in patch:
        patch["additional_images"] = ",".join(patch["additional_images"])

    try:
        for k, v in patch.items():
            setattr(product, k, v)
        _check_digital(product)
        repos.products.update(product)
    except ValidationError as e:
        repos.products.session.rollback()
        return invalid_data(ErrorCode.PRODUCT_CREATION_DATA_INVALID, e)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.PRODUCT_ALREADY_EXISTS, "Failed to update product")
    return ok(product.to_dict())


@products_bp.delete("/<product_id>/")
@require_store_staff
@require_store_permission(MANAGE_PRODUCTS)
def delete_product(product_id: str):
    try:
        get_repositories().products.delete(g.store.store_id, product_id)
    except NotFoundError:
        return not_found(ErrorCode.PRODUCT_NOT_FOUND, "Product not found")
    except ConflictError as e:
        return conflict(ErrorCode.PRODUCT_IN_USE, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to delete product")
    return no_content()


@products_bp.put("/<product_id>/attributes/")
@require_store_staff
@require_store_permission(MANAGE_PRODUCTS)
def put_product_attribute(product_id: str):
    try:
        req = validate_product_attribute(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.PRODUCT_ATTRIBUTE_CREATION_DATA_INVALID, e)

    repo = get_repositories().products
    try:
        product = repo.get_as_store_staff(g.store.store_id, product_id)
        attribute = repo.add_attribute(ProductAttribute(product_id=product.id, key=req.key, value=req.value))
    except NotFoundError:
        return not_found(ErrorCode.PRODUCT_NOT_FOUND, "Product not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to save product attribute")
    return ok(attribute.to_dict())


@products_bp.delete("/<product_id>/attributes/<key>/")
@require_store_staff
@require_store_permission(MANAGE_PRODUCTS)
def delete_product_attribute(product_id: str, key: str):
    repo = get_repositories().products
    try:
        product = repo.get_as_store_staff(g.store.store_id, product_id)
    except NotFoundError:
        return not_found(ErrorCode.PRODUCT_NOT_FOUND, "Product not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get product")

    try:
        repo.remove_attribute(product.id, key)
    except NotFoundError:
        return not_found(ErrorCode.PRODUCT_ATTRIBUTE_NOT_FOUND, "Product attribute not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to delete product attribute")
    return no_content()

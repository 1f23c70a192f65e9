# Overview: Flask API routes for categories; public and store-staff views.

from flask import Blueprint, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import is_store_staff, might_be_store_staff, require_store_permission, require_store_staff
from ..errors import ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..models import Category
from ..permissions import MANAGE_CATEGORIES
from ..response import created, database_query_failed, invalid_data, no_content, not_found, ok, write_failed
from ..validators import parse_pagination
from ..validators.catalog import validate_category_create, validate_category_update

categories_bp = Blueprint("categories", __name__, url_prefix="/v1/categories")


@categories_bp.post("/")
@require_store_staff
@require_store_permission(MANAGE_CATEGORIES)
def create_category():
    try:
        req = validate_category_create(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.CATEGORY_CREATION_DATA_INVALID, e)

    category = Category(
        store_id=g.store.store_id,
        name=req.name,
        description=req.description,
        image=req.image,
    )
    try:
        get_repositories().categories.create(category)
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.CATEGORY_ALREADY_EXISTS, "Failed to create category")
    return created(category.to_dict())


@categories_bp.get("/")
@might_be_store_staff
def list_categories():
    """
    Public: categories of active stores. Staff: their own store's categories.

    Query params: page, limit, query (name search).
    """
    p = parse_pagination(request.args)
    repo = get_repositories().categories
    try:
        if is_store_staff():
            if p.query:
                categories = repo.search_as_store_staff(p.query, g.store.store_id, p.offset, p.limit)
            else:
                categories = repo.list_as_store_staff(g.store.store_id, p.offset, p.limit)
        elif p.query:
            categories = repo.search(p.query, p.offset, p.limit)
        else:
            categories = repo.list(p.offset, p.limit)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list categories")
    return ok([c.to_dict() for c in categories])


@categories_bp.get("/<category_id>/")
@might_be_store_staff
def get_category(category_id: str):
    repo = get_repositories().categories
    try:
        if is_store_staff():
            category = repo.get_as_store_staff(g.store.store_id, category_id)
        else:
            category = repo.get_details(category_id)
    except NotFoundError:
        return not_found(ErrorCode.CATEGORY_NOT_FOUND, "Category not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get category")
    return ok(category.to_dict())


@categories_bp.patch("/<category_id>/")
@require_store_staff
@require_store_permission(MANAGE_CATEGORIES)
def update_category(category_id: str):
    try:
        patch = validate_category_update(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.CATEGORY_CREATION_DATA_INVALID, e)

    repo = get_repositories().categories
    try:
        category = repo.get_as_store_staff(g.store.store_id, category_id)
        for k, v in patch.items():
            setattr(category, k, v)
        repo.update(category)
    except NotFoundError:
        return not_found(ErrorCode.CATEGORY_NOT_FOUND, "Category not found")
    except SQLAlchemyError as e:
        return write_failed(e, ErrorCode.CATEGORY_ALREADY_EXISTS, "Failed to update category")
    return ok(category.to_dict())


@categories_bp.delete("/<category_id>/")
@require_store_staff
@require_store_permission(MANAGE_CATEGORIES)
def delete_category(category_id: str):
    try:
        get_repositories().categories.delete(g.store.store_id, category_id)
    except NotFoundError:
        return not_found(ErrorCode.CATEGORY_NOT_FOUND, "Category not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to delete category")
    return no_content()

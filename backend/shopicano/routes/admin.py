# Overview: Flask API routes for platform-level store moderation.

from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_auth, require_permission
from ..errors import ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..permissions import MANAGE_STORES
from ..response import database_query_failed, invalid_data, not_found, ok
from ..validators import parse_pagination
from ..validators.store import validate_store_status

admin_bp = Blueprint("admin", __name__, url_prefix="/v1/admin")


@admin_bp.get("/stores/")
@require_auth
@require_permission(MANAGE_STORES)
def list_stores():
    p = parse_pagination(request.args)
    try:
        stores = get_repositories().stores.list_stores(p.offset, p.limit)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list stores")
    return ok([s.to_dict() for s in stores])


@admin_bp.patch("/stores/<store_id>/status/")
@require_auth
@require_permission(MANAGE_STORES)
def update_store_status(store_id: str):
    try:
        status = validate_store_status(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.STORE_STATUS_DATA_INVALID, e)

    try:
        store = get_repositories().stores.update_status(store_id, status)
    except NotFoundError:
        return not_found(ErrorCode.STORE_NOT_FOUND, "Store not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to update store status")

    current_app.logger.info("Store %s set to %s by %s", store.id, status, g.current_user.id)
    return ok(store.to_dict())

# Overview: Flask API routes for store staff working their store's orders.

from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..decorators import require_store_permission, require_store_staff
from ..errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..permissions import MANAGE_ORDERS
from ..response import conflict, database_query_failed, invalid_data, not_found, ok
from ..validators import parse_pagination
from ..validators.order import validate_order_status, validate_payment_status

store_orders_bp = Blueprint("store_orders", __name__, url_prefix="/v1/stores/orders")


@store_orders_bp.get("/")
@require_store_staff
@require_store_permission(MANAGE_ORDERS)
def list_store_orders():
    p = parse_pagination(request.args)
    try:
        orders = get_repositories().orders.list_as_store_staff(g.store.store_id, p.offset, p.limit)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list orders")
    return ok([o.to_dict() for o in orders])


@store_orders_bp.get("/<order_id>/")
@require_store_staff
@require_store_permission(MANAGE_ORDERS)
def get_store_order(order_id: str):
    try:
        order = get_repositories().orders.get_as_store_staff(g.store.store_id, order_id)
    except NotFoundError:
        return not_found(ErrorCode.ORDER_NOT_FOUND, "Order not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get order")
    return ok(order.to_dict())


@store_orders_bp.patch("/<order_id>/status/")
@require_store_staff
@require_store_permission(MANAGE_ORDERS)
def update_order_status(order_id: str):
    try:
        status = validate_order_status(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.ORDER_UPDATE_DATA_INVALID, e)

    try:
        order = get_repositories().orders.update_status(g.store.store_id, order_id, status)
    except NotFoundError:
        return not_found(ErrorCode.ORDER_NOT_FOUND, "Order not found")
    except ConflictError as e:
        return conflict(ErrorCode.ORDER_STATUS_CONFLICT, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to update order status")

    current_app.logger.info("Order %s status -> %s", order.hash, order.status)
    return ok(order.to_dict())


@store_orders_bp.patch("/<order_id>/payment-status/")
@require_store_staff
@require_store_permission(MANAGE_ORDERS)
def update_order_payment_status(order_id: str):
    try:
        payment_status = validate_payment_status(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.ORDER_UPDATE_DATA_INVALID, e)

    try:
        order = get_repositories().orders.update_payment_status(g.store.store_id, order_id, payment_status)
    except NotFoundError:
        return not_found(ErrorCode.ORDER_NOT_FOUND, "Order not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to update payment status")
    return ok(order.to_dict())

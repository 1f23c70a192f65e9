# Overview: Flask API routes for customers placing and reading their own orders.

# backend/shopicano/routes/orders.py
"""
Customer order routes.

An order belongs to exactly one store: every item must be a published
product of the same active store. Addresses must belong to the caller;
payment/shipping methods and the coupon must belong to the store.

Totals are computed server-side (checkout.price_order); order, items and
stock decrement are persisted in one commit by OrderRepository.create().
"""
from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from ..checkout import coupon_unavailable_reason, price_order
from ..decorators import require_auth, require_permission
from ..errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from ..extensions import get_repositories
from ..models import Order, OrderedItem
from ..permissions import PLACE_ORDER
from ..response import (
    Response,
    conflict,
    created,
    database_query_failed,
    invalid_data,
    not_found,
    ok,
)
from ..time_utils import utcnow
from ..validators import parse_pagination
from ..validators.order import validate_order_create

orders_bp = Blueprint("orders", __name__, url_prefix="/v1/orders")


def _load_order_products(repos, items) -> tuple[list, str]:
    """
    Resolve requested items to (product, quantity) lines of a single store.

    Raises ValidationError naming every offending item.
    """
    products = repos.products.get_many([i.product_id for i in items])
    errors: dict[str, list[str]] = {}
    lines = []
    store_ids = set()
    for idx, item in enumerate(items):
        product = products.get(item.product_id)
        if product is None or not product.is_published or not product.store.is_active:
            errors[f"items[{idx}].id"] = ["product not found"]
            continue
        store_ids.add(product.store_id)
        lines.append((product, item.quantity))

    if len(store_ids) > 1:
        errors["items"] = ["all items must belong to the same store"]
    if errors:
        raise ValidationError(errors)
    return lines, store_ids.pop()


@orders_bp.post("/")
@require_auth
@require_permission(PLACE_ORDER)
def create_order():
    try:
        req = validate_order_create(request.get_json(silent=True))
    except ValidationError as e:
        return invalid_data(ErrorCode.ORDER_CREATION_DATA_INVALID, e)

    repos = get_repositories()
    user_id = g.current_user.id

    try:
        lines, store_id = _load_order_products(repos, req.items)
    except ValidationError as e:
        return invalid_data(ErrorCode.ORDER_CREATION_DATA_INVALID, e)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to load order products")

    for product, quantity in lines:
        if product.stock < quantity:
            return conflict(ErrorCode.PRODUCT_OUT_OF_STOCK, f"Insufficient stock for product {product.id}")

    needs_shipping = any(product.is_shippable for product, _ in lines)
    if needs_shipping:
        missing = {
            k: [f"{k} is required for shippable products"]
            for k in ("shipping_address_id", "shipping_method_id")
            if getattr(req, k) is None
        }
        if missing:
            return invalid_data(ErrorCode.ORDER_CREATION_DATA_INVALID, ValidationError(missing))

    try:
        repos.addresses.get(user_id, req.billing_address_id)
        if req.shipping_address_id is not None:
            repos.addresses.get(user_id, req.shipping_address_id)
    except NotFoundError:
        return not_found(ErrorCode.ADDRESS_NOT_FOUND, "Address not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get address")

    try:
        payment_method = repos.payment_methods.get(store_id, req.payment_method_id)
        if not payment_method.is_published:
            raise NotFoundError("Payment method not found")
    except NotFoundError:
        return not_found(ErrorCode.PAYMENT_METHOD_NOT_FOUND, "Payment method not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get payment method")

    shipping_method = None
    if req.shipping_method_id is not None:
        try:
            shipping_method = repos.shipping_methods.get(store_id, req.shipping_method_id)
            if not shipping_method.is_published:
                raise NotFoundError("Shipping method not found")
        except NotFoundError:
            return not_found(ErrorCode.SHIPPING_METHOD_NOT_FOUND, "Shipping method not found")
        except SQLAlchemyError as e:
            return database_query_failed(e, "Failed to get shipping method")

    coupon = None
    if req.coupon_code is not None:
        try:
            coupon = repos.coupons.get_by_code(store_id, req.coupon_code)
            usage = repos.coupons.usage_count(coupon.id)
        except NotFoundError:
            return not_found(ErrorCode.COUPON_NOT_FOUND, "Coupon not found")
        except SQLAlchemyError as e:
            return database_query_failed(e, "Failed to get coupon")
        reason = coupon_unavailable_reason(coupon, utcnow(), usage)
        if reason is not None:
            return Response(status=422, code=ErrorCode.COUPON_NOT_APPLICABLE, title=reason).server_json()

    totals = price_order(lines, payment_method=payment_method, shipping_method=shipping_method, coupon=coupon)

    order = Order(
        store_id=store_id,
        user_id=user_id,
        billing_address_id=req.billing_address_id,
        shipping_address_id=req.shipping_address_id,
        payment_method_id=payment_method.id,
        shipping_method_id=shipping_method.id if shipping_method else None,
        coupon_id=coupon.id if coupon else None,
        sub_total=totals.sub_total,
        shipping_charge=totals.shipping_charge,
        payment_processing_fee=totals.payment_processing_fee,
        discount=totals.discount,
        grand_total=totals.grand_total,
    )
    items = [
        OrderedItem(product_id=line.product_id, quantity=line.quantity, price=line.price, sub_total=line.sub_total)
        for line in totals.lines
    ]

    try:
        repos.orders.create(order, items)
    except ConflictError as e:
        return conflict(ErrorCode.PRODUCT_OUT_OF_STOCK, str(e))
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to create order")

    current_app.logger.info("Order %s placed at store %s (%s)", order.hash, store_id, order.grand_total)
    return created(order.to_dict())


@orders_bp.get("/")
@require_auth
def list_orders():
    p = parse_pagination(request.args)
    try:
        orders = get_repositories().orders.list(g.current_user.id, p.offset, p.limit)
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to list orders")
    return ok([o.to_dict() for o in orders])


@orders_bp.get("/<order_id>/")
@require_auth
def get_order(order_id: str):
    try:
        order = get_repositories().orders.get(g.current_user.id, order_id)
    except NotFoundError:
        return not_found(ErrorCode.ORDER_NOT_FOUND, "Order not found")
    except SQLAlchemyError as e:
        return database_query_failed(e, "Failed to get order")
    return ok(order.to_dict())

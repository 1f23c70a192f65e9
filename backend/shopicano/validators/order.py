from __future__ import annotations

from dataclasses import dataclass, field

from ..models.orders import ORDER_STATUSES, PAYMENT_STATUSES
from .common import PayloadReader

MAX_ITEM_QUANTITY = 10_000_000
MAX_ORDER_ITEMS = 100


@dataclass
class OrderItemRequest:
    product_id: str
    quantity: int


@dataclass
class OrderCreateRequest:
    billing_address_id: str
    payment_method_id: str
    items: list[OrderItemRequest] = field(default_factory=list)
    shipping_address_id: str | None = None
    shipping_method_id: str | None = None
    coupon_code: str | None = None


def _items(r: PayloadReader) -> list[OrderItemRequest]:
    raw = r.payload.get("items")
    if not raw:
        r.error("items", "items is required")
        return []
    if not isinstance(raw, list):
        r.error("items", "items must be a list")
        return []
    if len(raw) > MAX_ORDER_ITEMS:
        r.error("items", f"items must have at most {MAX_ORDER_ITEMS} entries")
        return []

    items: list[OrderItemRequest] = []
    seen: set[str] = set()
    for idx, entry in enumerate(raw):
        key = f"items[{idx}]"
        if not isinstance(entry, dict):
            r.error(key, f"{key} must be an object")
            continue
        # Read the entry with its own reader so messages name the item
        item = PayloadReader(entry)
        product_id = item.string("id", required=True, max_length=36)
        quantity = item.integer("quantity", required=True, min_value=1, max_value=MAX_ITEM_QUANTITY)
        for f, messages in item.errors.items():
            for m in messages:
                r.error(f"{key}.{f}", m)
        if product_id is None or quantity is None:
            continue
        if product_id in seen:
            r.error(f"{key}.id", "duplicate product in items")
            continue
        seen.add(product_id)
        items.append(OrderItemRequest(product_id=product_id, quantity=quantity))
    return items


def validate_order_create(payload) -> OrderCreateRequest:
    r = PayloadReader(payload)
    items = _items(r)
    req = OrderCreateRequest(
        items=items,
        billing_address_id=r.string("billing_address_id", required=True, max_length=36),
        payment_method_id=r.string("payment_method_id", required=True, max_length=36),
        shipping_address_id=r.string("shipping_address_id", max_length=36),
        shipping_method_id=r.string("shipping_method_id", max_length=36),
        coupon_code=r.string("coupon_code", max_length=32),
    )
    if req.coupon_code:
        req.coupon_code = req.coupon_code.upper()
    r.finish()
    return req


def validate_order_status(payload) -> str:
    r = PayloadReader(payload)
    status = r.choice("status", ORDER_STATUSES, required=True)
    r.finish()
    return status


def validate_payment_status(payload) -> str:
    r = PayloadReader(payload)
    status = r.choice("payment_status", PAYMENT_STATUSES, required=True)
    r.finish()
    return status

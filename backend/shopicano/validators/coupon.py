from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..errors import ValidationError
from ..models.coupons import DISCOUNT_PRODUCT, DISCOUNT_TYPES
from .common import MAX_AMOUNT, PayloadReader, collect_patch


@dataclass
class CouponCreateRequest:
    code: str
    discount_amount: int
    start_at: datetime
    end_at: datetime
    is_active: bool = True
    is_flat_discount: bool = True
    max_discount: int = 0
    max_usage: int = 0
    discount_type: str = DISCOUNT_PRODUCT


def _cross_field_errors(
    is_flat_discount: bool | None,
    discount_amount: int | None,
    start_at: datetime | None,
    end_at: datetime | None,
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if is_flat_discount is False and discount_amount is not None and discount_amount > 100:
        errors["discount_amount"] = ["discount_amount must be at most 100 for percentage discounts"]
    if start_at is not None and end_at is not None and end_at <= start_at:
        errors["end_at"] = ["end_at must be after start_at"]
    return errors


def check_coupon_rules(is_flat_discount, discount_amount, start_at, end_at) -> None:
    """Rules spanning several fields; run on the merged record after a patch."""
    errors = _cross_field_errors(is_flat_discount, discount_amount, start_at, end_at)
    if errors:
        raise ValidationError(errors)


def _code(r: PayloadReader, required: bool) -> str | None:
    code = r.string("code", required=required, max_length=32)
    return code.upper() if code else code


def validate_coupon_create(payload) -> CouponCreateRequest:
    r = PayloadReader(payload)
    code = _code(r, required=True)
    discount_amount = r.integer("discount_amount", required=True, min_value=1, max_value=MAX_AMOUNT)
    is_flat = r.boolean("is_flat_discount")
    start_at = r.datetime("start_at", required=True)
    end_at = r.datetime("end_at", required=True)
    is_active = r.boolean("is_active")

    req = CouponCreateRequest(
        code=code,
        discount_amount=discount_amount,
        start_at=start_at,
        end_at=end_at,
        is_active=True if is_active is None else is_active,
        is_flat_discount=True if is_flat is None else is_flat,
        max_discount=r.integer("max_discount", min_value=0, max_value=MAX_AMOUNT) or 0,
        max_usage=r.integer("max_usage", min_value=0, max_value=MAX_AMOUNT) or 0,
        discount_type=r.choice("discount_type", DISCOUNT_TYPES) or DISCOUNT_PRODUCT,
    )
    for key, messages in _cross_field_errors(req.is_flat_discount, discount_amount, start_at, end_at).items():
        for m in messages:
            r.error(key, m)
    r.finish()
    return req


def validate_coupon_update(payload) -> dict:
    r = PayloadReader(payload)
    patch = collect_patch(r, {
        "code": lambda: _code(r, required=True),
        "discount_amount": lambda: r.integer("discount_amount", required=True, min_value=1, max_value=MAX_AMOUNT),
        "is_flat_discount": lambda: r.boolean("is_flat_discount", required=True),
        "is_active": lambda: r.boolean("is_active", required=True),
        "max_discount": lambda: r.integer("max_discount", required=True, min_value=0, max_value=MAX_AMOUNT),
        "max_usage": lambda: r.integer("max_usage", required=True, min_value=0, max_value=MAX_AMOUNT),
        "discount_type": lambda: r.choice("discount_type", DISCOUNT_TYPES, required=True),
        "start_at": lambda: r.datetime("start_at", required=True),
        "end_at": lambda: r.datetime("end_at", required=True),
    })
    r.finish()
    return patch

# Overview: Order pricing. Pure arithmetic over already-loaded records; no database access.

from __future__ import annotations

from dataclasses import dataclass, field

from .models.coupons import DISCOUNT_SHIPPING, DISCOUNT_TOTAL


@dataclass
class PricedLine:
    product_id: str
    quantity: int
    price: int
    sub_total: int


@dataclass
class OrderTotals:
    """
    All amounts in the smallest currency unit.

    grand_total = sub_total + shipping_charge + payment_processing_fee - discount
    """
    lines: list[PricedLine] = field(default_factory=list)
    sub_total: int = 0
    shipping_charge: int = 0
    payment_processing_fee: int = 0
    discount: int = 0

    @property
    def grand_total(self) -> int:
        return self.sub_total + self.shipping_charge + self.payment_processing_fee - self.discount


def processing_fee(payment_method, base: int) -> int:
    if payment_method is None:
        return 0
    if payment_method.is_flat:
        return payment_method.processing_fee
    return base * payment_method.processing_fee // 100


def price_order(lines, payment_method=None, shipping_method=None, coupon=None) -> OrderTotals:
    """
    Price an order.

    lines: iterable of (product, quantity); the product's current price is
    captured on the line. The percentage processing fee applies to
    sub total + shipping; the coupon base depends on its discount_type.
    """
    totals = OrderTotals()
    for product, quantity in lines:
        line_total = product.price * quantity
        totals.lines.append(PricedLine(
            product_id=product.id,
            quantity=quantity,
            price=product.price,
            sub_total=line_total,
        ))
        totals.sub_total += line_total

    if shipping_method is not None:
        totals.shipping_charge = shipping_method.delivery_charge

    totals.payment_processing_fee = processing_fee(
        payment_method, totals.sub_total + totals.shipping_charge
    )

    if coupon is not None:
        if coupon.discount_type == DISCOUNT_SHIPPING:
            base = totals.shipping_charge
        elif coupon.discount_type == DISCOUNT_TOTAL:
            base = totals.sub_total + totals.shipping_charge + totals.payment_processing_fee
        else:
            # DISCOUNT_PRODUCT and anything unrecognised discount the goods only
            base = totals.sub_total
        totals.discount = coupon.calculate_discount(base)

    return totals



def coupon_unavailable_reason(coupon, when, usage_count: int) -> str | None:
    """None when the coupon can be redeemed at `when`, otherwise why not."""
    if not coupon.is_active:
        return "Coupon is not active"
    if when < coupon.start_at:
        return "Coupon is not valid yet"
    if when > coupon.end_at:
        return "Coupon has expired"
    if coupon.max_usage and usage_count >= coupon.max_usage:
        return "Coupon usage limit reached"
    return None

# Overview: Pytest coverage for order pricing, coupon availability and report bucketing.

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from shopicano.checkout import coupon_unavailable_reason, price_order, processing_fee
from shopicano.models import Coupon
from shopicano.models.coupons import DISCOUNT_PRODUCT, DISCOUNT_SHIPPING, DISCOUNT_TOTAL
from shopicano.reporting import build_time_frames

NOW = datetime(2026, 10, 19, 12, 0, 0)


def _product(pid, price):
    return SimpleNamespace(id=pid, price=price)


def _coupon(**kwargs):
    fields = {
        "code": "SAVE",
        "is_active": True,
        "discount_amount": 10,
        "is_flat_discount": False,
        "max_discount": 0,
        "max_usage": 0,
        "discount_type": DISCOUNT_PRODUCT,
        "start_at": NOW - timedelta(days=1),
        "end_at": NOW + timedelta(days=1),
    }
    fields.update(kwargs)
    return Coupon(**fields)


FLAT_FEE = SimpleNamespace(is_flat=True, processing_fee=50)
PERCENT_FEE = SimpleNamespace(is_flat=False, processing_fee=2)
COURIER = SimpleNamespace(delivery_charge=100)


# =============================================================================
# PRICING
# =============================================================================


class TestPriceOrder:
    def test_lines_capture_price_and_sub_total(self):
        totals = price_order([(_product("a", 250), 2), (_product("b", 100), 3)])
        assert totals.sub_total == 800
        assert [(l.product_id, l.price, l.sub_total) for l in totals.lines] == [("a", 250, 500), ("b", 100, 300)]
        assert totals.grand_total == 800

    def test_shipping_and_flat_fee(self):
        totals = price_order([(_product("a", 1000), 1)], payment_method=FLAT_FEE, shipping_method=COURIER)
        assert totals.shipping_charge == 100
        assert totals.payment_processing_fee == 50
        assert totals.grand_total == 1150

    def test_percentage_fee_applies_to_goods_and_shipping(self):
        assert processing_fee(PERCENT_FEE, 1100) == 22
        totals = price_order([(_product("a", 1000), 1)], payment_method=PERCENT_FEE, shipping_method=COURIER)
        assert totals.payment_processing_fee == 22

    def test_product_coupon_discounts_goods_only(self):
        totals = price_order(
            [(_product("a", 1000), 1)],
            shipping_method=COURIER,
            coupon=_coupon(discount_type=DISCOUNT_PRODUCT),
        )
        assert totals.discount == 100
        assert totals.grand_total == 1000

    def test_shipping_coupon_discounts_shipping_only(self):
        totals = price_order(
            [(_product("a", 1000), 1)],
            shipping_method=COURIER,
            coupon=_coupon(discount_type=DISCOUNT_SHIPPING, is_flat_discount=True, discount_amount=500),
        )
        assert totals.discount == 100

    def test_total_coupon_includes_fee(self):
        totals = price_order(
            [(_product("a", 1000), 1)],
            payment_method=FLAT_FEE,
            shipping_method=COURIER,
            coupon=_coupon(discount_type=DISCOUNT_TOTAL, discount_amount=10),
        )
        assert totals.discount == 115

    def test_percentage_discount_capped(self):
        coupon = _coupon(discount_amount=50, max_discount=200)
        assert coupon.calculate_discount(1000) == 200


class TestCouponAvailability:
    def test_available(self):
        assert coupon_unavailable_reason(_coupon(), NOW, 0) is None

    @pytest.mark.parametrize("kwargs,usage,reason", [
        ({"is_active": False}, 0, "Coupon is not active"),
        ({"start_at": NOW + timedelta(hours=1)}, 0, "Coupon is not valid yet"),
        ({"end_at": NOW - timedelta(hours=1)}, 0, "Coupon has expired"),
        ({"max_usage": 2}, 2, "Coupon usage limit reached"),
    ])
    def test_unavailable(self, kwargs, usage, reason):
        assert coupon_unavailable_reason(_coupon(**kwargs), NOW, usage) == reason

    def test_zero_max_usage_is_unlimited(self):
        assert coupon_unavailable_reason(_coupon(max_usage=0), NOW, 10_000) is None


# =============================================================================
# REPORT BUCKETS
# =============================================================================


class TestTimeFrames:
    @pytest.mark.parametrize("timeline,count,width", [
        ("w", 7, timedelta(days=1)),
        ("m", 5, timedelta(days=7)),
        ("y", 12, timedelta(days=30)),
    ])
    def test_bucket_count_and_width(self, timeline, count, width):
        frames = build_time_frames(timeline, NOW)
        assert len(frames) == count
        assert all(end - start == width for start, end in frames)

    def test_ascending_and_contiguous_ending_now(self):
        frames = build_time_frames("w", NOW)
        assert frames[-1][1] == NOW
        assert frames[0][0] == NOW - timedelta(days=7)
        for (_, prev_end), (next_start, _) in zip(frames, frames[1:]):
            assert prev_end == next_start

    def test_unknown_timeline(self):
        with pytest.raises(KeyError):
            build_time_frames("d", NOW)

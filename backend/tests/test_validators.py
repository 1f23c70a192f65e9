# Overview: Pytest coverage for request payload validation and pagination parsing.

from datetime import datetime, timedelta, timezone

import pytest

from shopicano.errors import ValidationError
from shopicano.time_utils import to_utc_z
from shopicano.validators import PayloadReader, collect_patch, parse_pagination
from shopicano.validators.catalog import validate_product_create, validate_product_update
from shopicano.validators.coupon import check_coupon_rules, validate_coupon_create
from shopicano.validators.order import validate_order_create
from shopicano.validators.store import validate_payment_method
from shopicano.validators.user import validate_sign_up


def _product_payload(**overrides):
    payload = {"name": "Tea", "sku": "TEA-1", "unit": "box", "price": 250, "stock": 3}
    payload.update(overrides)
    return payload


# =============================================================================
# PAYLOAD READER
# =============================================================================


class TestPayloadReader:
    def test_collects_every_error_before_raising(self):
        r = PayloadReader({"age": "x"})
        r.string("name", required=True)
        r.integer("age")
        with pytest.raises(ValidationError) as exc:
            r.finish()
        assert set(exc.value.errors) == {"name", "age"}

    def test_non_object_body_is_an_error(self):
        r = PayloadReader(["not", "an", "object"])
        with pytest.raises(ValidationError) as exc:
            r.finish()
        assert "body" in exc.value.errors

    @pytest.mark.parametrize("raw", ["1e3", "2.5", True])
    def test_integer_rejects_non_plain_values(self, raw):
        r = PayloadReader({"n": raw})
        assert r.integer("n") is None
        assert "n" in r.errors

    def test_integer_accepts_numeric_string(self):
        r = PayloadReader({"n": " 42 "})
        assert r.integer("n") == 42
        assert r.errors == {}

    def test_boolean_is_strict(self):
        r = PayloadReader({"flag": "true"})
        assert r.boolean("flag") is None
        assert "flag" in r.errors

    def test_email_is_lowercased(self):
        r = PayloadReader({"email": "Someone@Example.COM"})
        assert r.email("email") == "someone@example.com"


class TestCollectPatch:
    def test_absent_fields_stay_out_of_the_patch(self):
        r = PayloadReader({"name": "New"})
        patch = collect_patch(r, {
            "name": lambda: r.string("name", required=True),
            "phone": lambda: r.string("phone"),
        })
        assert patch == {"name": "New"}

    def test_explicit_null_clears_nullable_field(self):
        r = PayloadReader({"phone": None})
        patch = collect_patch(r, {"phone": lambda: r.string("phone")})
        assert patch == {"phone": None}

    def test_explicit_null_on_required_field_is_an_error(self):
        r = PayloadReader({"name": None})
        patch = collect_patch(r, {"name": lambda: r.string("name", required=True)})
        assert patch == {}
        assert "name" in r.errors


class TestPagination:
    def test_defaults(self):
        p = parse_pagination({})
        assert (p.page, p.limit, p.query, p.offset) == (1, 10, "", 0)

    def test_offset(self):
        p = parse_pagination({"page": "3", "limit": "20", "query": " tea "})
        assert p.offset == 40
        assert p.query == "tea"

    @pytest.mark.parametrize("page,limit", [("0", "-5"), ("abc", "x"), ("", "")])
    def test_bad_values_fall_back(self, page, limit):
        p = parse_pagination({"page": page, "limit": limit})
        assert (p.page, p.limit) == (1, 10)


class TestDatetimeField:
    @pytest.mark.parametrize("raw", ["2026-03-01T12:00:00Z", "2026-03-01T14:00:00+02:00", "2026-03-01T12:00:00"])
    def test_normalized_to_naive_utc(self, raw):
        r = PayloadReader({"start_at": raw})
        assert r.datetime("start_at") == datetime(2026, 3, 1, 12, 0)

    def test_garbage_is_a_field_error(self):
        r = PayloadReader({"start_at": "next tuesday"})
        assert r.datetime("start_at") is None
        assert "start_at" in r.errors

    def test_serialized_with_z(self):
        aware = datetime(2026, 3, 1, 14, 0, 5, 999, tzinfo=timezone(timedelta(hours=2)))
        assert to_utc_z(aware) == "2026-03-01T12:00:05Z"
        assert to_utc_z(None) is None


# =============================================================================
# DOMAIN VALIDATORS
# =============================================================================


class TestSignUp:
    def test_short_password_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_sign_up({"name": "A", "email": "a@b.co", "password": "short"})
        assert "password" in exc.value.errors

    def test_valid_payload(self):
        req = validate_sign_up({"name": "A", "email": "A@B.co", "password": "longenough"})
        assert req.email == "a@b.co"


class TestProductPayloads:
    def test_empty_category_id_means_no_category(self):
        req = validate_product_create(_product_payload(category_id=""))
        assert req.category_id is None

    def test_digital_product_requires_link(self):
        with pytest.raises(ValidationError) as exc:
            validate_product_create(_product_payload(is_digital=True))
        assert "digital_download_link" in exc.value.errors

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_product_create(_product_payload(stock=-1))
        assert "stock" in exc.value.errors

    def test_update_rejects_null_price(self):
        with pytest.raises(ValidationError) as exc:
            validate_product_update({"price": None})
        assert "price" in exc.value.errors

    def test_update_empty_category_clears_it(self):
        assert validate_product_update({"category_id": ""}) == {"category_id": None}


class TestCouponPayloads:
    def _payload(self, **overrides):
        payload = {
            "code": "save10",
            "discount_amount": 10,
            "is_flat_discount": False,
            "start_at": "2026-01-01T00:00:00Z",
            "end_at": "2026-02-01T00:00:00Z",
        }
        payload.update(overrides)
        return payload

    def test_code_is_uppercased(self):
        assert validate_coupon_create(self._payload()).code == "SAVE10"

    def test_percentage_over_100_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_coupon_create(self._payload(discount_amount=150))
        assert "discount_amount" in exc.value.errors

    def test_end_must_follow_start(self):
        with pytest.raises(ValidationError) as exc:
            validate_coupon_create(self._payload(end_at="2025-12-31T00:00:00Z"))
        assert "end_at" in exc.value.errors

    def test_flat_discount_may_exceed_100(self):
        check_coupon_rules(True, 5000, None, None)


class TestOrderPayload:
    def test_items_required(self):
        with pytest.raises(ValidationError) as exc:
            validate_order_create({"billing_address_id": "a", "payment_method_id": "p"})
        assert "items" in exc.value.errors

    def test_duplicate_products_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_order_create({
                "items": [{"id": "p1", "quantity": 1}, {"id": "p1", "quantity": 2}],
                "billing_address_id": "a",
                "payment_method_id": "p",
            })
        assert "items[1].id" in exc.value.errors

    def test_zero_quantity_named_per_item(self):
        with pytest.raises(ValidationError) as exc:
            validate_order_create({
                "items": [{"id": "p1", "quantity": 0}],
                "billing_address_id": "a",
                "payment_method_id": "p",
            })
        assert "items[0].quantity" in exc.value.errors


class TestPaymentMethodPayload:
    def test_percentage_fee_capped(self):
        with pytest.raises(ValidationError) as exc:
            validate_payment_method({"name": "Card", "processing_fee": 120, "is_flat": False})
        assert "processing_fee" in exc.value.errors

    def test_defaults_to_flat(self):
        req = validate_payment_method({"name": "Cash"})
        assert req.is_flat is True
        assert req.processing_fee == 0

# Overview: Pytest coverage for tenant isolation behavior.

"""
Multi-Tenant Isolation Tests

Two active stores with their own staff. Every staff-scoped read or write
against the other store's records must answer 404 (never 403, so existence
is not revealed), and uniqueness rules are per store, not global.

Coverage:
- Products: cross-store read/update/delete, SKU uniqueness per store
- Categories: cross-store read/update, category binding on products
- Coupons: cross-store read, code uniqueness per store
- Orders: staff only see their store's orders; customers only their own
"""

from conftest import coupon_window, login_headers
from shopicano.models import Category, Order
from shopicano.time_utils import utcnow


def _product(sku, **overrides):
    payload = {"name": f"Item {sku}", "sku": sku, "unit": "pcs", "price": 500, "stock": 10, "is_published": True}
    payload.update(overrides)
    return payload


class TestProductIsolation:
    def test_staff_cannot_touch_other_store_product(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        headers_a = login_headers(client, owner_a.email)
        headers_b = login_headers(client, owner_b.email)

        product_id = client.post("/v1/products/", json=_product("B-1"), headers=headers_b).json["data"]["id"]

        assert client.get(f"/v1/products/{product_id}/", headers=headers_a).status_code == 404
        assert client.patch(f"/v1/products/{product_id}/", json={"price": 1}, headers=headers_a).status_code == 404
        assert client.delete(f"/v1/products/{product_id}/", headers=headers_a).status_code == 404
        assert client.put(f"/v1/products/{product_id}/attributes/", json={"key": "k", "value": "v"},
                          headers=headers_a).status_code == 404

        # Still intact for its own store
        resp = client.get(f"/v1/products/{product_id}/", headers=headers_b)
        assert resp.status_code == 200
        assert resp.json["data"]["price"] == 500

    def test_staff_list_is_store_scoped(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        client.post("/v1/products/", json=_product("A-1"), headers=login_headers(client, owner_a.email))
        client.post("/v1/products/", json=_product("B-1"), headers=login_headers(client, owner_b.email))

        listed = client.get("/v1/products/", headers=login_headers(client, owner_a.email)).json["data"]
        assert [p["sku"] for p in listed] == ["A-1"]

        public = client.get("/v1/products/").json["data"]
        assert {p["name"] for p in public} == {"Item A-1", "Item B-1"}

    def test_sku_unique_per_store_only(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        headers_a = login_headers(client, owner_a.email)

        assert client.post("/v1/products/", json=_product("SHARED"), headers=headers_a).status_code == 201
        dup = client.post("/v1/products/", json=_product("SHARED"), headers=headers_a)
        assert dup.status_code == 409
        assert dup.json["code"] == "PRODUCT_ALREADY_EXISTS"

        other = client.post("/v1/products/", json=_product("SHARED"), headers=login_headers(client, owner_b.email))
        assert other.status_code == 201


class TestProductPaging:
    def test_second_page_skips_the_first(self, client, store_a, make_product):
        store, _ = store_a
        for n in range(12):
            make_product(store, f"P-{n:02d}")

        first = [p["sku"] for p in client.get("/v1/products/?page=1&limit=10").json["data"]]
        second = [p["sku"] for p in client.get("/v1/products/?page=2&limit=10").json["data"]]
        assert first == [f"P-{n:02d}" for n in range(10)]
        assert second == ["P-10", "P-11"]

    def test_bad_page_and_limit_fall_back(self, client, store_a, make_product):
        store, _ = store_a
        for n in range(12):
            make_product(store, f"P-{n:02d}")

        resp = client.get("/v1/products/?page=x&limit=-3")
        assert resp.status_code == 200
        assert [p["sku"] for p in resp.json["data"]] == [f"P-{n:02d}" for n in range(10)]


class TestCategoryIsolation:
    def test_cross_store_category(self, client, db_session, store_a, store_b):
        _, owner_a = store_a
        store_b_obj, _ = store_b
        category = Category(store_id=store_b_obj.id, name="Beverages")
        db_session.add(category)
        db_session.commit()

        headers_a = login_headers(client, owner_a.email)
        assert client.get(f"/v1/categories/{category.id}/", headers=headers_a).status_code == 404
        assert client.patch(f"/v1/categories/{category.id}/", json={"name": "X"}, headers=headers_a).status_code == 404

        # A product cannot be filed under another store's category
        resp = client.post("/v1/products/", json=_product("A-1", category_id=category.id), headers=headers_a)
        assert resp.status_code == 404
        assert resp.json["code"] == "CATEGORY_NOT_FOUND"

    def test_empty_category_id_stored_as_null(self, client, store_a):
        _, owner = store_a
        resp = client.post("/v1/products/", json=_product("A-1", category_id=""),
                           headers=login_headers(client, owner.email))
        assert resp.status_code == 201
        assert resp.json["data"]["category_id"] is None

    def test_category_name_unique_per_store(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        headers_a = login_headers(client, owner_a.email)
        assert client.post("/v1/categories/", json={"name": "Tea"}, headers=headers_a).status_code == 201
        assert client.post("/v1/categories/", json={"name": "Tea"}, headers=headers_a).status_code == 409
        assert client.post("/v1/categories/", json={"name": "Tea"},
                           headers=login_headers(client, owner_b.email)).status_code == 201


class TestCouponIsolation:
    def test_cross_store_coupon(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        start, end = coupon_window()
        payload = {"code": "WELCOME", "discount_amount": 50, "start_at": start, "end_at": end}

        created = client.post("/v1/coupons/", json=payload, headers=login_headers(client, owner_b.email))
        assert created.status_code == 201
        coupon_id = created.json["data"]["id"]

        headers_a = login_headers(client, owner_a.email)
        assert client.get(f"/v1/coupons/{coupon_id}/", headers=headers_a).status_code == 404
        assert client.delete(f"/v1/coupons/{coupon_id}/", headers=headers_a).status_code == 404

        # Same code in another store is fine; twice in one store is not
        assert client.post("/v1/coupons/", json=payload, headers=headers_a).status_code == 201
        dup = client.post("/v1/coupons/", json=payload, headers=headers_a)
        assert dup.status_code == 409
        assert dup.json["code"] == "COUPON_ALREADY_EXISTS"


class TestOrderIsolation:
    def test_orders_scoped_to_store_and_customer(self, client, db_session, checkout_setup, store_b, make_user):
        setup = checkout_setup
        _, owner_b = store_b

        order = Order(
            store_id=setup["store"].id,
            user_id=setup["address"].user_id,
            billing_address_id=setup["address"].id,
            payment_method_id=setup["payment"].id,
            sub_total=1000,
            grand_total=1000,
            created_at=utcnow(),
        )
        db_session.add(order)
        db_session.commit()

        owner_a_headers = login_headers(client, setup["owner"].email)
        assert client.get(f"/v1/stores/orders/{order.id}/", headers=owner_a_headers).status_code == 200

        owner_b_headers = login_headers(client, owner_b.email)
        assert client.get(f"/v1/stores/orders/{order.id}/", headers=owner_b_headers).status_code == 404
        assert client.patch(f"/v1/stores/orders/{order.id}/status/", json={"status": "confirmed"},
                            headers=owner_b_headers).status_code == 404
        assert client.get("/v1/stores/orders/", headers=owner_b_headers).json["data"] == []

        stranger = make_user("stranger@shopicano.test")
        customer_headers = login_headers(client, stranger.email)
        assert client.get(f"/v1/orders/{order.id}/", headers=customer_headers).status_code == 404

# Overview: Pytest coverage for store creation, moderation, staff and store methods.

from conftest import ADMIN_EMAIL, login_headers
from shopicano.models import Settings
from shopicano.models.settings import SETTINGS_ID

STORE = {
    "name": "Corner Shop",
    "address": "9 Station Road",
    "city": "Sylhet",
    "country": "Bangladesh",
    "postcode": "3100",
    "email": "corner@shopicano.test",
    "phone": "+8801333333333",
}


def _enable_store_creation(db_session):
    settings = db_session.get(Settings, SETTINGS_ID)
    settings.is_store_creation_enabled = True
    db_session.commit()


# =============================================================================
# CREATION & MODERATION
# =============================================================================


class TestStoreCreation:
    def test_disabled_for_customers(self, client, customer):
        resp = client.post("/v1/stores/", json=STORE, headers=login_headers(client, customer.email))
        assert resp.status_code == 403
        assert resp.json["code"] == "STORE_CREATION_DISABLED"

    def test_admin_bypasses_toggle(self, client, platform):
        resp = client.post("/v1/stores/", json=STORE, headers=login_headers(client, ADMIN_EMAIL))
        assert resp.status_code == 201

    def test_new_store_is_pending_until_activated(self, client, db_session, customer):
        _enable_store_creation(db_session)
        headers = login_headers(client, customer.email)

        resp = client.post("/v1/stores/", json=STORE, headers=headers)
        assert resp.status_code == 201
        store_id = resp.json["data"]["id"]
        assert resp.json["data"]["status"] == "pending"

        # Staff routes stay closed while pending; the public view hides it too
        assert client.get("/v1/stores/mine/", headers=headers).status_code == 403
        assert client.get(f"/v1/stores/{store_id}/").status_code == 404

        admin_headers = login_headers(client, ADMIN_EMAIL)
        resp = client.patch(f"/v1/admin/stores/{store_id}/status/", json={"status": "active"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["status"] == "active"

        mine = client.get("/v1/stores/mine/", headers=headers)
        assert mine.status_code == 200
        assert mine.json["data"]["profile"]["permission_id"] == "store_admin"
        assert mine.json["data"]["profile"]["is_creator"] is True
        assert client.get(f"/v1/stores/{store_id}/").status_code == 200

    def test_one_store_per_user(self, client, db_session, store_a):
        _enable_store_creation(db_session)
        _, owner = store_a
        resp = client.post("/v1/stores/", json=STORE, headers=login_headers(client, owner.email))
        assert resp.status_code == 409
        assert resp.json["code"] == "USER_ALREADY_STAFF"

    def test_duplicate_store_name(self, client, db_session, store_a, customer):
        _enable_store_creation(db_session)
        payload = dict(STORE, name="Store A")
        resp = client.post("/v1/stores/", json=payload, headers=login_headers(client, customer.email))
        assert resp.status_code == 409
        assert resp.json["code"] == "STORE_ALREADY_EXISTS"

    def test_customers_cannot_moderate(self, client, store_a, customer):
        store, _ = store_a
        resp = client.patch(f"/v1/admin/stores/{store.id}/status/", json={"status": "suspended"},
                            headers=login_headers(client, customer.email))
        assert resp.status_code == 403

    def test_suspension_closes_staff_routes(self, client, store_a):
        store, owner = store_a
        headers = login_headers(client, owner.email)
        assert client.get("/v1/stores/mine/", headers=headers).status_code == 200

        client.patch(f"/v1/admin/stores/{store.id}/status/", json={"status": "suspended"},
                     headers=login_headers(client, ADMIN_EMAIL))
        assert client.get("/v1/stores/mine/", headers=headers).status_code == 403


# =============================================================================
# STAFF
# =============================================================================


class TestStaff:
    def test_add_list_update_remove(self, client, store_a, customer):
        _, owner = store_a
        headers = login_headers(client, owner.email)

        resp = client.post("/v1/stores/staffs/", json={"email": customer.email, "permission_id": "store_staff"},
                           headers=headers)
        assert resp.status_code == 201

        staffs = client.get("/v1/stores/staffs/", headers=headers).json["data"]
        assert {s["email"] for s in staffs} == {owner.email, customer.email}

        resp = client.patch(f"/v1/stores/staffs/{customer.id}/", json={"permission_id": "store_manager"},
                            headers=headers)
        assert resp.status_code == 200
        assert resp.json["data"]["permission_id"] == "store_manager"

        assert client.delete(f"/v1/stores/staffs/{customer.id}/", headers=headers).status_code == 204

    def test_platform_group_is_not_a_store_group(self, client, store_a, customer):
        _, owner = store_a
        resp = client.post("/v1/stores/staffs/", json={"email": customer.email, "permission_id": "admin"},
                           headers=login_headers(client, owner.email))
        assert resp.status_code == 422

    def test_staff_of_another_store_rejected(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        resp = client.post("/v1/stores/staffs/", json={"email": owner_b.email, "permission_id": "store_staff"},
                           headers=login_headers(client, owner_a.email))
        assert resp.status_code == 409
        assert resp.json["code"] == "USER_ALREADY_STAFF"

    def test_creator_cannot_be_changed(self, client, store_a):
        _, owner = store_a
        headers = login_headers(client, owner.email)
        resp = client.patch(f"/v1/stores/staffs/{owner.id}/", json={"permission_id": "store_staff"}, headers=headers)
        assert resp.status_code == 409
        assert resp.json["code"] == "STAFF_NOT_MODIFIABLE"
        assert client.delete(f"/v1/stores/staffs/{owner.id}/", headers=headers).status_code == 409

    def test_store_staff_group_cannot_manage_staff(self, client, store_a, customer):
        _, owner = store_a
        client.post("/v1/stores/staffs/", json={"email": customer.email, "permission_id": "store_staff"},
                    headers=login_headers(client, owner.email))
        resp = client.get("/v1/stores/staffs/", headers=login_headers(client, customer.email))
        assert resp.status_code == 403

    def test_other_store_staff_not_found(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        resp = client.patch(f"/v1/stores/staffs/{owner_b.id}/", json={"permission_id": "store_staff"},
                            headers=login_headers(client, owner_a.email))
        assert resp.status_code == 404


# =============================================================================
# PAYMENT & SHIPPING METHODS
# =============================================================================


class TestMethods:
    def test_public_lists_only_published(self, client, store_a):
        store, owner = store_a
        headers = login_headers(client, owner.email)
        client.post("/v1/stores/payment-methods/", json={"name": "Cash", "is_published": True}, headers=headers)
        client.post("/v1/stores/payment-methods/", json={"name": "Draft"}, headers=headers)

        assert len(client.get("/v1/stores/payment-methods/", headers=headers).json["data"]) == 2
        public = client.get(f"/v1/stores/{store.id}/payment-methods/").json["data"]
        assert [m["name"] for m in public] == ["Cash"]

    def test_duplicate_method_name(self, client, store_a):
        _, owner = store_a
        headers = login_headers(client, owner.email)
        payload = {"name": "Courier", "delivery_charge": 60, "approximate_delivery_time": 3}
        assert client.post("/v1/stores/shipping-methods/", json=payload, headers=headers).status_code == 201
        resp = client.post("/v1/stores/shipping-methods/", json=payload, headers=headers)
        assert resp.status_code == 409
        assert resp.json["code"] == "SHIPPING_METHOD_ALREADY_EXISTS"

    def test_delete_other_store_method_not_found(self, client, store_a, store_b):
        _, owner_a = store_a
        _, owner_b = store_b
        created = client.post("/v1/stores/shipping-methods/", json={"name": "Courier"},
                              headers=login_headers(client, owner_b.email))
        method_id = created.json["data"]["id"]
        resp = client.delete(f"/v1/stores/shipping-methods/{method_id}/", headers=login_headers(client, owner_a.email))
        assert resp.status_code == 404

# Overview: Pytest coverage for sign-up gating, sessions, the envelope and platform headers.

import pytest

from conftest import ADMIN_EMAIL, TEST_PASSWORD, auth_headers, get_auth_token, login_headers
from shopicano.models import Settings
from shopicano.models.settings import SETTINGS_ID
from shopicano.response import PLATFORM_HEADERS


def _enable_sign_up(db_session):
    settings = db_session.get(Settings, SETTINGS_ID)
    settings.is_sign_up_enabled = True
    db_session.commit()


SIGN_UP = {"name": "New Shopper", "email": "new@shopicano.test", "password": "longenough1"}


# =============================================================================
# SIGN UP
# =============================================================================


class TestSignUp:
    def test_disabled_by_default(self, client, platform):
        resp = client.post("/v1/users/signup/", json=SIGN_UP)
        assert resp.status_code == 403
        assert resp.json["code"] == "USER_SIGN_UP_DISABLED"

    def test_enabled(self, client, db_session, platform):
        _enable_sign_up(db_session)
        resp = client.post("/v1/users/signup/", json=SIGN_UP)
        assert resp.status_code == 201
        data = resp.json["data"]
        assert data["email"] == SIGN_UP["email"]
        assert data["permission_id"] == "user"
        assert "password" not in data

    def test_duplicate_email_conflicts(self, client, db_session, platform):
        _enable_sign_up(db_session)
        client.post("/v1/users/signup/", json=SIGN_UP)
        resp = client.post("/v1/users/signup/", json=SIGN_UP)
        assert resp.status_code == 409
        assert resp.json["code"] == "USER_ALREADY_EXISTS"

    def test_invalid_payload_lists_every_field(self, client, db_session, platform):
        _enable_sign_up(db_session)
        resp = client.post("/v1/users/signup/", json={"email": "nope"})
        assert resp.status_code == 422
        assert resp.json["code"] == "USER_SIGN_UP_DATA_INVALID"
        assert {"name", "email", "password"} <= set(resp.json["errors"])


# =============================================================================
# SESSIONS
# =============================================================================


class TestSessions:
    def test_login_returns_token_pair(self, client, customer):
        resp = client.post("/v1/users/login/", json={"email": customer.email, "password": TEST_PASSWORD})
        assert resp.status_code == 200
        data = resp.json["data"]
        assert data["user_id"] == customer.id
        assert len(data["access_token"]) == 64
        assert data["access_token"] != data["refresh_token"]
        assert data["access_token_expire_on"].endswith("Z")

    def test_wrong_password(self, client, customer):
        resp = client.post("/v1/users/login/", json={"email": customer.email, "password": "wrong-password"})
        assert resp.status_code == 401
        assert resp.json["code"] == "USER_LOGIN_FAILED"

    def test_unknown_email_looks_the_same(self, client, platform):
        resp = client.post("/v1/users/login/", json={"email": "ghost@shopicano.test", "password": TEST_PASSWORD})
        assert resp.status_code == 401
        assert resp.json["code"] == "USER_LOGIN_FAILED"

    def test_me_requires_token(self, client, platform):
        resp = client.get("/v1/users/me/")
        assert resp.status_code == 401
        assert resp.json["code"] == "UNAUTHORIZED"

    def test_me(self, client, customer):
        resp = client.get("/v1/users/me/", headers=login_headers(client, customer.email))
        assert resp.status_code == 200
        assert resp.json["data"]["id"] == customer.id
        assert "place_order" in resp.json["data"]["permissions"]

    def test_refresh_swaps_the_pair(self, client, customer):
        login = client.post("/v1/users/login/", json={"email": customer.email, "password": TEST_PASSWORD}).json["data"]

        resp = client.post("/v1/users/refresh-token/", json={"refresh_token": login["refresh_token"]})
        assert resp.status_code == 200
        fresh = resp.json["data"]

        assert client.get("/v1/users/me/", headers=auth_headers(login["access_token"])).status_code == 401
        assert client.get("/v1/users/me/", headers=auth_headers(fresh["access_token"])).status_code == 200

        again = client.post("/v1/users/refresh-token/", json={"refresh_token": login["refresh_token"]})
        assert again.status_code == 401
        assert again.json["code"] == "INVALID_REFRESH_TOKEN"

    def test_logout_invalidates_token(self, client, customer):
        token = get_auth_token(client, customer.email)
        resp = client.post("/v1/users/logout/", headers=auth_headers(token))
        assert resp.status_code == 204
        assert resp.data == b""
        assert client.get("/v1/users/me/", headers=auth_headers(token)).status_code == 401

    def test_update_me_is_partial(self, client, customer):
        headers = login_headers(client, customer.email)
        resp = client.patch("/v1/users/me/", json={"phone": "+880123"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json["data"]["phone"] == "+880123"
        assert resp.json["data"]["name"] == "Customer"

    def test_update_me_rejects_null_name(self, client, customer):
        headers = login_headers(client, customer.email)
        resp = client.patch("/v1/users/me/", json={"name": None}, headers=headers)
        assert resp.status_code == 422


class TestAddresses:
    ADDRESS = {
        "name": "Office",
        "address": "3 Hill Road",
        "city": "Chittagong",
        "country": "Bangladesh",
        "postcode": "4000",
        "phone": "+8801222222222",
    }

    def test_addresses_are_private(self, client, customer, make_user):
        headers = login_headers(client, customer.email)
        created = client.post("/v1/users/me/addresses/", json=self.ADDRESS, headers=headers)
        assert created.status_code == 201
        address_id = created.json["data"]["id"]

        other = make_user("other@shopicano.test")
        other_headers = login_headers(client, other.email)
        assert client.get(f"/v1/users/me/addresses/{address_id}/", headers=other_headers).status_code == 404
        assert client.get("/v1/users/me/addresses/", headers=other_headers).json["data"] == []

        assert client.delete(f"/v1/users/me/addresses/{address_id}/", headers=headers).status_code == 204


# =============================================================================
# SETTINGS
# =============================================================================


class TestSettings:
    def test_public_read(self, client, platform):
        resp = client.get("/v1/settings/")
        assert resp.status_code == 200
        assert resp.json["data"]["is_sign_up_enabled"] is False

    def test_customer_cannot_update(self, client, customer):
        resp = client.patch("/v1/settings/", json={"is_sign_up_enabled": True},
                            headers=login_headers(client, customer.email))
        assert resp.status_code == 403

    def test_admin_updates(self, client, platform):
        resp = client.patch("/v1/settings/", json={"is_sign_up_enabled": True, "tag_line": "Buy local"},
                            headers=login_headers(client, ADMIN_EMAIL))
        assert resp.status_code == 200
        assert resp.json["data"]["is_sign_up_enabled"] is True
        assert resp.json["data"]["tag_line"] == "Buy local"


# =============================================================================
# ENVELOPE & HEADERS
# =============================================================================


class TestEnvelope:
    @pytest.mark.parametrize("method,path", [
        ("GET", "/v1/settings/"),
        ("GET", "/v1/users/me/"),
        ("GET", "/v1/does-not-exist/"),
        ("DELETE", "/v1/settings/"),
    ])
    def test_platform_headers_everywhere(self, client, platform, method, path):
        resp = client.open(path, method=method)
        for name, value in PLATFORM_HEADERS.items():
            assert resp.headers[name] == value

    def test_unknown_route_uses_envelope(self, client, platform):
        resp = client.get("/v1/does-not-exist/")
        assert resp.status_code == 404
        assert resp.json["code"] == "ROUTE_NOT_FOUND"
        assert "data" not in resp.json

    def test_wrong_method(self, client, platform):
        resp = client.delete("/v1/settings/")
        assert resp.status_code == 405
        assert resp.json["code"] == "METHOD_NOT_ALLOWED"

# Overview: Pytest coverage for repository lookups that no route calls directly.

import pytest

from shopicano.errors import NotFoundError
from shopicano.extensions import get_repositories
from shopicano.models.users import USER_INACTIVE


class TestUserPermissionLookup:
    def test_active_user_resolves_to_group(self, customer):
        ctx = get_repositories().users.get_permission_by_user_id(customer.id)
        assert ctx.user.id == customer.id
        assert ctx.permission_id == "user"
        assert "place_order" in ctx.permissions
        assert "manage_settings" not in ctx.permissions

    def test_admin_group(self, platform):
        ctx = get_repositories().users.get_permission_by_user_id(platform.id)
        assert ctx.permission_id == "admin"
        assert "manage_stores" in ctx.permissions

    def test_inactive_or_unknown_user(self, db_session, customer):
        customer.status = USER_INACTIVE
        db_session.commit()
        users = get_repositories().users
        assert users.get_permission_by_user_id(customer.id) is None
        assert users.get_permission_by_user_id("no-such-user") is None


class TestProductLookup:
    def test_get_ignores_publication(self, store_a, make_product):
        store, _ = store_a
        hidden = make_product(store, "HIDDEN-1", is_published=False)
        products = get_repositories().products

        assert products.get(hidden.id).sku == "HIDDEN-1"
        with pytest.raises(NotFoundError):
            products.get_details(hidden.id)

    def test_get_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            get_repositories().products.get("no-such-product")

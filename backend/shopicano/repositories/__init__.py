# Overview: Repository container built once per application in create_app().

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .address_repository import AddressRepository
from .category_repository import CategoryRepository
from .coupon_repository import CouponRepository
from .method_repository import PaymentMethodRepository, ShippingMethodRepository
from .order_repository import OrderRepository, Summary
from .product_repository import ProductDetails, ProductRepository
from .settings_repository import SettingsRepository
from .store_repository import StoreRepository, StoreUserProfile
from .user_repository import TokenPair, UserPermissionContext, UserRepository


@dataclass
class Repositories:
    users: UserRepository
    settings: SettingsRepository
    addresses: AddressRepository
    stores: StoreRepository
    payment_methods: PaymentMethodRepository
    shipping_methods: ShippingMethodRepository
    categories: CategoryRepository
    products: ProductRepository
    coupons: CouponRepository
    orders: OrderRepository


def build_repositories(session, config) -> Repositories:
    """Wire every repository to the same session."""
    return Repositories(
        users=UserRepository(
            session,
            access_ttl=timedelta(hours=int(config["ACCESS_TOKEN_TTL_HOURS"])),
            refresh_ttl=timedelta(hours=int(config["REFRESH_TOKEN_TTL_HOURS"])),
        ),
        settings=SettingsRepository(session),
        addresses=AddressRepository(session),
        stores=StoreRepository(session),
        payment_methods=PaymentMethodRepository(session),
        shipping_methods=ShippingMethodRepository(session),
        categories=CategoryRepository(session),
        products=ProductRepository(session),
        coupons=CouponRepository(session),
        orders=OrderRepository(session),
    )


__all__ = [
    "Repositories", "build_repositories",
    "AddressRepository", "CategoryRepository", "CouponRepository",
    "PaymentMethodRepository", "ShippingMethodRepository",
    "OrderRepository", "Summary",
    "ProductRepository", "ProductDetails",
    "SettingsRepository",
    "StoreRepository", "StoreUserProfile",
    "UserRepository", "TokenPair", "UserPermissionContext",
]

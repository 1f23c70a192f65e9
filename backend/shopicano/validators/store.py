from __future__ import annotations

from dataclasses import dataclass

from ..models.stores import STORE_STATUSES
from ..permissions import STORE_GROUP_IDS
from .common import MAX_AMOUNT, PayloadReader, collect_patch


@dataclass
class StoreCreateRequest:
    name: str
    address: str
    city: str
    country: str
    postcode: str
    email: str
    phone: str
    description: str | None = None
    logo_image: str | None = None
    cover_image: str | None = None


@dataclass
class StaffAddRequest:
    email: str
    permission_id: str


@dataclass
class PaymentMethodRequest:
    name: str
    processing_fee: int
    is_flat: bool
    is_offline_payment: bool
    is_published: bool


@dataclass
class ShippingMethodRequest:
    name: str
    delivery_charge: int
    approximate_delivery_time: int
    is_published: bool


def validate_store_create(payload) -> StoreCreateRequest:
    r = PayloadReader(payload)
    req = StoreCreateRequest(
        name=r.string("name", required=True, max_length=120),
        address=r.string("address", required=True, max_length=255),
        city=r.string("city", required=True, max_length=120),
        country=r.string("country", required=True, max_length=120),
        postcode=r.string("postcode", required=True, max_length=32),
        email=r.email("email", required=True),
        phone=r.string("phone", required=True, max_length=32),
        description=r.string("description", max_length=5000),
        logo_image=r.string("logo_image", max_length=512),
        cover_image=r.string("cover_image", max_length=512),
    )
    r.finish()
    return req


def validate_store_status(payload) -> str:
    r = PayloadReader(payload)
    status = r.choice("status", STORE_STATUSES, required=True)
    r.finish()
    return status


def _store_group(r: PayloadReader) -> str | None:
    return r.choice("permission_id", sorted(STORE_GROUP_IDS), required=True)


def validate_staff_add(payload) -> StaffAddRequest:
    r = PayloadReader(payload)
    req = StaffAddRequest(
        email=r.email("email", required=True),
        permission_id=_store_group(r),
    )
    r.finish()
    return req


def validate_staff_permission(payload) -> str:
    r = PayloadReader(payload)
    permission_id = _store_group(r)
    r.finish()
    return permission_id


def validate_payment_method(payload) -> PaymentMethodRequest:
    r = PayloadReader(payload)
    name = r.string("name", required=True, max_length=120)
    fee = r.integer("processing_fee", min_value=0, max_value=MAX_AMOUNT)
    is_flat = r.boolean("is_flat")
    if is_flat is False and fee is not None and fee > 100:
        r.error("processing_fee", "processing_fee must be at most 100 for percentage fees")
    req = PaymentMethodRequest(
        name=name,
        processing_fee=fee or 0,
        is_flat=True if is_flat is None else is_flat,
        is_offline_payment=bool(r.boolean("is_offline_payment")),
        is_published=bool(r.boolean("is_published")),
    )
    r.finish()
    return req


def validate_shipping_method(payload) -> ShippingMethodRequest:
    r = PayloadReader(payload)
    req = ShippingMethodRequest(
        name=r.string("name", required=True, max_length=120),
        delivery_charge=r.integer("delivery_charge", min_value=0, max_value=MAX_AMOUNT) or 0,
        approximate_delivery_time=r.integer("approximate_delivery_time", min_value=0, max_value=365) or 0,
        is_published=bool(r.boolean("is_published")),
    )
    r.finish()
    return req


def validate_settings_update(payload) -> dict:
    r = PayloadReader(payload)
    patch = collect_patch(r, {
        "name": lambda: r.string("name", required=True, max_length=255),
        "url": lambda: r.string("url", max_length=255),
        "tag_line": lambda: r.string("tag_line", max_length=255),
        "is_active": lambda: r.boolean("is_active", required=True),
        "company_name": lambda: r.string("company_name", max_length=255),
        "company_address": lambda: r.string("company_address", max_length=255),
        "company_city": lambda: r.string("company_city", max_length=120),
        "company_country": lambda: r.string("company_country", max_length=120),
        "company_postcode": lambda: r.string("company_postcode", max_length=32),
        "company_email": lambda: r.email("company_email"),
        "company_phone": lambda: r.string("company_phone", max_length=32),
        "is_sign_up_enabled": lambda: r.boolean("is_sign_up_enabled", required=True),
        "is_store_creation_enabled": lambda: r.boolean("is_store_creation_enabled", required=True),
    })
    r.finish()
    return patch

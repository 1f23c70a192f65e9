from __future__ import annotations

from dataclasses import dataclass

from .common import PayloadReader, collect_patch


@dataclass
class SignUpRequest:
    name: str
    email: str
    password: str
    phone: str | None = None


@dataclass
class LoginRequest:
    email: str
    password: str


@dataclass
class AddressRequest:
    name: str
    address: str
    city: str
    country: str
    postcode: str
    phone: str
    email: str | None = None


def validate_sign_up(payload) -> SignUpRequest:
    r = PayloadReader(payload)
    name = r.string("name", required=True, max_length=120)
    email = r.email("email", required=True)
    password = r.string("password", required=True, min_length=8, max_length=100)
    phone = r.string("phone", max_length=32)
    r.finish()
    return SignUpRequest(name=name, email=email, password=password, phone=phone)


def validate_login(payload) -> LoginRequest:
    r = PayloadReader(payload)
    email = r.email("email", required=True)
    password = r.string("password", required=True)
    r.finish()
    return LoginRequest(email=email, password=password)


def validate_refresh_token(payload) -> str:
    r = PayloadReader(payload)
    token = r.string("refresh_token", required=True, max_length=128)
    r.finish()
    return token


def validate_user_update(payload) -> dict:
    r = PayloadReader(payload)
    patch = collect_patch(r, {
        "name": lambda: r.string("name", required=True, max_length=120),
        "phone": lambda: r.string("phone", max_length=32),
        "profile_picture": lambda: r.string("profile_picture", max_length=512),
    })
    r.finish()
    return patch


def validate_address(payload) -> AddressRequest:
    r = PayloadReader(payload)
    req = AddressRequest(
        name=r.string("name", required=True, max_length=120),
        address=r.string("address", required=True, max_length=255),
        city=r.string("city", required=True, max_length=120),
        country=r.string("country", required=True, max_length=120),
        postcode=r.string("postcode", required=True, max_length=32),
        phone=r.string("phone", required=True, max_length=32),
        email=r.email("email"),
    )
    r.finish()
    return req

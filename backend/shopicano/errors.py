# Overview: Error codes carried in the response envelope and the domain exceptions handlers map to HTTP status.

from __future__ import annotations

import re

from sqlalchemy.exc import IntegrityError


class ErrorCode:
    """Machine-readable codes placed in the envelope's `code` field."""

    DATABASE_QUERY_FAILED = "DATABASE_QUERY_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    USER_SIGN_UP_DATA_INVALID = "USER_SIGN_UP_DATA_INVALID"
    USER_SIGN_UP_DISABLED = "USER_SIGN_UP_DISABLED"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    USER_LOGIN_DATA_INVALID = "USER_LOGIN_DATA_INVALID"
    USER_LOGIN_FAILED = "USER_LOGIN_FAILED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_UPDATE_DATA_INVALID = "USER_UPDATE_DATA_INVALID"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"

    ADDRESS_DATA_INVALID = "ADDRESS_DATA_INVALID"
    ADDRESS_NOT_FOUND = "ADDRESS_NOT_FOUND"
    ADDRESS_IN_USE = "ADDRESS_IN_USE"

    SETTINGS_NOT_FOUND = "SETTINGS_NOT_FOUND"
    SETTINGS_UPDATE_DATA_INVALID = "SETTINGS_UPDATE_DATA_INVALID"

    STORE_CREATION_DATA_INVALID = "STORE_CREATION_DATA_INVALID"
    STORE_CREATION_DISABLED = "STORE_CREATION_DISABLED"
    STORE_ALREADY_EXISTS = "STORE_ALREADY_EXISTS"
    STORE_NOT_FOUND = "STORE_NOT_FOUND"
    STORE_STATUS_DATA_INVALID = "STORE_STATUS_DATA_INVALID"
    USER_ALREADY_STAFF = "USER_ALREADY_STAFF"
    STAFF_DATA_INVALID = "STAFF_DATA_INVALID"
    STAFF_NOT_FOUND = "STAFF_NOT_FOUND"
    STAFF_NOT_MODIFIABLE = "STAFF_NOT_MODIFIABLE"

    PAYMENT_METHOD_DATA_INVALID = "PAYMENT_METHOD_DATA_INVALID"
    PAYMENT_METHOD_NOT_FOUND = "PAYMENT_METHOD_NOT_FOUND"
    PAYMENT_METHOD_ALREADY_EXISTS = "PAYMENT_METHOD_ALREADY_EXISTS"
    PAYMENT_METHOD_IN_USE = "PAYMENT_METHOD_IN_USE"
    SHIPPING_METHOD_DATA_INVALID = "SHIPPING_METHOD_DATA_INVALID"
    SHIPPING_METHOD_NOT_FOUND = "SHIPPING_METHOD_NOT_FOUND"
    SHIPPING_METHOD_ALREADY_EXISTS = "SHIPPING_METHOD_ALREADY_EXISTS"
    SHIPPING_METHOD_IN_USE = "SHIPPING_METHOD_IN_USE"

    CATEGORY_CREATION_DATA_INVALID = "CATEGORY_CREATION_DATA_INVALID"
    CATEGORY_ALREADY_EXISTS = "CATEGORY_ALREADY_EXISTS"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"

    PRODUCT_CREATION_DATA_INVALID = "PRODUCT_CREATION_DATA_INVALID"
    PRODUCT_ALREADY_EXISTS = "PRODUCT_ALREADY_EXISTS"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_IN_USE = "PRODUCT_IN_USE"
    PRODUCT_ATTRIBUTE_CREATION_DATA_INVALID = "PRODUCT_ATTRIBUTE_CREATION_DATA_INVALID"
    PRODUCT_ATTRIBUTE_NOT_FOUND = "PRODUCT_ATTRIBUTE_NOT_FOUND"

    COUPON_CREATION_DATA_INVALID = "COUPON_CREATION_DATA_INVALID"
    COUPON_ALREADY_EXISTS = "COUPON_ALREADY_EXISTS"
    COUPON_NOT_FOUND = "COUPON_NOT_FOUND"
    COUPON_NOT_APPLICABLE = "COUPON_NOT_APPLICABLE"
    COUPON_IN_USE = "COUPON_IN_USE"

    ORDER_CREATION_DATA_INVALID = "ORDER_CREATION_DATA_INVALID"
    ORDER_UPDATE_DATA_INVALID = "ORDER_UPDATE_DATA_INVALID"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_STATUS_CONFLICT = "ORDER_STATUS_CONFLICT"
    PRODUCT_OUT_OF_STOCK = "PRODUCT_OUT_OF_STOCK"

    STATS_QUERY_INVALID = "STATS_QUERY_INVALID"

    FILE_UPLOAD_DATA_INVALID = "FILE_UPLOAD_DATA_INVALID"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_NOT_AN_IMAGE = "FILE_NOT_AN_IMAGE"
    STORAGE_FAILED = "STORAGE_FAILED"


class NotFoundError(LookupError):
    """404-level miss. Tenant-scoped lookups raise this for foreign records too."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., user is already staff elsewhere)."""


class StorageError(RuntimeError):
    """Blob store unreachable or answering with something other than a miss."""


class ValidationError(ValueError):
    """
    422-level input problem.

    Carries every failing field at once: {"field": ["message", ...]}.
    """

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__("Invalid data")
        self.errors = errors

    def to_dict(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self.errors.items()}


_DUPLICATE_PATTERNS = (
    re.compile(r"UNIQUE constraint failed", re.IGNORECASE),  # SQLite
    re.compile(r"duplicate key value violates unique constraint", re.IGNORECASE),  # PostgreSQL
    re.compile(r"Duplicate entry .* for key", re.IGNORECASE),  # MySQL
)


def is_duplicate_key_error(exc: BaseException) -> tuple[str, bool]:
    """
    Distinguish unique-constraint violations from other database failures.

    Returns (driver message, True) for a duplicate key, ("", False) otherwise.
    """
    if not isinstance(exc, IntegrityError):
        return "", False

    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return str(orig).strip().splitlines()[0], True

    message = str(orig if orig is not None else exc).strip()
    for pattern in _DUPLICATE_PATTERNS:
        if pattern.search(message):
            return message.splitlines()[0], True
    return "", False

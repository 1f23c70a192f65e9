from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..errors import ValidationError
from ..time_utils import parse_iso_datetime

# Largest amount accepted for prices, fees and discounts (smallest currency unit)
MAX_AMOUNT = 999_999_999

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PayloadReader:
    """
    Reads typed fields out of a JSON body and collects every problem.

    Each accessor returns the coerced value, or None when the field is
    absent or invalid; the failure is recorded instead of raised. Call
    finish() once all fields are read to raise a single ValidationError
    with the complete {field: [messages]} map.

    has(key) tells "absent" from "sent as null/empty", which patch
    validators rely on.
    """

    def __init__(self, payload: Any):
        self.errors: dict[str, list[str]] = {}
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            self.error("body", "Invalid JSON payload")
            payload = {}
        self.payload = payload

    def error(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def has(self, key: str) -> bool:
        return key in self.payload

    def _raw(self, key: str, required: bool):
        raw = self.payload.get(key)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            if required:
                self.error(key, f"{key} is required")
            return None
        return raw

    def string(
        self,
        key: str,
        *,
        required: bool = False,
        min_length: int = 0,
        max_length: int | None = None,
    ) -> str | None:
        raw = self._raw(key, required)
        if raw is None:
            return None
        if not isinstance(raw, str):
            self.error(key, f"{key} must be a string")
            return None
        value = raw.strip()
        if len(value) < min_length:
            self.error(key, f"{key} must be at least {min_length} characters")
            return None
        if max_length is not None and len(value) > max_length:
            self.error(key, f"{key} must be at most {max_length} characters")
            return None
        return value

    def email(self, key: str, *, required: bool = False) -> str | None:
        value = self.string(key, required=required, max_length=255)
        if value is None:
            return None
        if not _EMAIL_RE.match(value):
            self.error(key, f"{key} must be a valid email address")
            return None
        return value.lower()

    def integer(
        self,
        key: str,
        *,
        required: bool = False,
        min_value: int | None = None,
        max_value: int | None = None,
    ) -> int | None:
        raw = self._raw(key, required)
        if raw is None:
            return None

        value: int | None = None
        # bool is a subclass of int; reject it explicitly
        if isinstance(raw, int) and not isinstance(raw, bool):
            value = raw
        elif isinstance(raw, str):
            stripped = raw.strip()
            if "e" in stripped.lower() or "." in stripped:
                self.error(key, f"{key} must be a plain integer")
                return None
            try:
                value = int(stripped)
            except ValueError:
                value = None
        if value is None:
            self.error(key, f"{key} must be an integer")
            return None

        if min_value is not None and value < min_value:
            self.error(key, f"{key} must be at least {min_value}")
            return None
        if max_value is not None and value > max_value:
            self.error(key, f"{key} must be at most {max_value}")
            return None
        return value

    def boolean(self, key: str, *, required: bool = False) -> bool | None:
        raw = self.payload.get(key)
        if raw is None:
            if required:
                self.error(key, f"{key} is required")
            return None
        if not isinstance(raw, bool):
            self.error(key, f"{key} must be a boolean")
            return None
        return raw

    def datetime(self, key: str, *, required: bool = False) -> datetime | None:
        raw = self._raw(key, required)
        if raw is None:
            return None
        if not isinstance(raw, str):
            self.error(key, f"{key} must be an ISO-8601 datetime")
            return None
        try:
            return parse_iso_datetime(raw)
        except ValueError:
            self.error(key, f"{key} must be an ISO-8601 datetime")
            return None

    def choice(self, key: str, choices, *, required: bool = False) -> str | None:
        value = self.string(key, required=required)
        if value is None:
            return None
        if value not in choices:
            self.error(key, f"{key} must be one of: {', '.join(choices)}")
            return None
        return value

    def string_list(self, key: str, *, max_items: int = 20) -> list[str]:
        """List of strings, trimmed, empties dropped. Absent means []."""
        raw = self.payload.get(key)
        if raw is None:
            return []
        if not isinstance(raw, list) or not all(isinstance(i, str) for i in raw):
            self.error(key, f"{key} must be a list of strings")
            return []
        values = [i.strip() for i in raw if i.strip()]
        if len(values) > max_items:
            self.error(key, f"{key} must have at most {max_items} items")
            return []
        return values

    def finish(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def collect_patch(reader: PayloadReader, fields: dict) -> dict:
    """
    Build a partial-update dict.

    `fields` maps a field name to a zero-arg reader; only keys present in
    the payload are read, so absent fields never reach the patch. Readers
    for non-nullable columns pass required=True, which turns an explicit
    null or blank into a field error instead of a cleared column.
    """
    patch: dict = {}
    for key, read in fields.items():
        if not reader.has(key):
            continue
        errors_before = len(reader.errors.get(key, []))
        value = read()
        if len(reader.errors.get(key, [])) == errors_before:
            patch[key] = value
    return patch


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    query: str

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def parse_pagination(args) -> Pagination:
    """page/limit/query from a query string; bad page or limit fall back to 1/10."""
    return Pagination(
        page=_positive_int(args.get("page"), DEFAULT_PAGE),
        limit=_positive_int(args.get("limit"), DEFAULT_LIMIT),
        query=(args.get("query") or "").strip(),
    )

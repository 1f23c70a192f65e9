from __future__ import annotations

from ..extensions import db
from ..permissions import parse_permissions
from ..time_utils import to_utc_z, utcnow

SETTINGS_ID = "1"


class Settings(db.Model):
    """
    Platform-wide configuration. Exactly one row, keyed "1".

    Sign-up and store creation gating read the two toggles here.
    """
    __tablename__ = "settings"

    id = db.Column(db.String(36), primary_key=True, default=SETTINGS_ID)
    name = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(255), nullable=True)
    tag_line = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    company_name = db.Column(db.String(255), nullable=True)
    company_address = db.Column(db.String(255), nullable=True)
    company_city = db.Column(db.String(120), nullable=True)
    company_country = db.Column(db.String(120), nullable=True)
    company_postcode = db.Column(db.String(32), nullable=True)
    company_email = db.Column(db.String(255), nullable=True)
    company_phone = db.Column(db.String(32), nullable=True)

    is_sign_up_enabled = db.Column(db.Boolean, nullable=False, default=False)
    is_store_creation_enabled = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "tag_line": self.tag_line,
            "is_active": self.is_active,
            "company_name": self.company_name,
            "company_address": self.company_address,
            "company_city": self.company_city,
            "company_country": self.company_country,
            "company_postcode": self.company_postcode,
            "company_email": self.company_email,
            "company_phone": self.company_phone,
            "is_sign_up_enabled": self.is_sign_up_enabled,
            "is_store_creation_enabled": self.is_store_creation_enabled,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class UserPermission(db.Model):
    """
    A permission group. Users reference a platform group; staff records
    reference a store group. `permission` holds comma-separated codes.
    """
    __tablename__ = "user_permissions"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    permission = db.Column(db.Text, nullable=False, default="")

    @property
    def permissions(self) -> set[str]:
        return parse_permissions(self.permission)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "permissions": sorted(self.permissions),
        }

from __future__ import annotations

from ..extensions import db
from ..identifiers import new_uuid
from ..time_utils import to_utc_z, utcnow

USER_ACTIVE = "active"
USER_INACTIVE = "inactive"


class User(db.Model):
    """
    A platform account. Customers and store staff are both Users; store
    membership lives in Staff.
    """
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password = db.Column(db.String(255), nullable=False)

    phone = db.Column(db.String(32), nullable=True)
    profile_picture = db.Column(db.String(512), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=USER_ACTIVE, index=True)

    permission_id = db.Column(db.String(36), db.ForeignKey("user_permissions.id"), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    permission_group = db.relationship("UserPermission")

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "profile_picture": self.profile_picture,
            "status": self.status,
            "permission_id": self.permission_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Session(db.Model):
    """
    Access/refresh token pair bound to a user.

    Tokens are stored as SHA-256 hashes; the plaintext pair is only ever
    returned once, by login or refresh. The two expiries are independent.
    """
    __tablename__ = "sessions"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    access_token = db.Column(db.String(64), nullable=False, unique=True, index=True)
    refresh_token = db.Column(db.String(64), nullable=False, unique=True, index=True)

    access_expire_on = db.Column(db.DateTime(timezone=True), nullable=False)
    refresh_expire_on = db.Column(db.DateTime(timezone=True), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    user = db.relationship("User", backref=db.backref("sessions", lazy=True, cascade="all, delete-orphan"))


class Address(db.Model):
    """Billing / shipping address owned by a user."""
    __tablename__ = "addresses"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    country = db.Column(db.String(120), nullable=False)
    postcode = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "postcode": self.postcode,
            "email": self.email,
            "phone": self.phone,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

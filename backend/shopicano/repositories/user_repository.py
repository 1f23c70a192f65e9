"""
User and session persistence.

Sessions carry two opaque tokens (access + refresh) with independent
expiries. Only SHA-256 hashes hit the database; the plaintext pair is
returned exactly once, inside a TokenPair.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..errors import NotFoundError
from ..identifiers import hash_token, new_token
from ..models import Session, Settings, User, UserPermission
from ..models.settings import SETTINGS_ID
from ..models.users import USER_ACTIVE
from ..passwords import verify_password
from ..time_utils import to_utc_z, utcnow
from .base import Repository

USER_MUTABLE_FIELDS = {"name", "phone", "profile_picture"}


@dataclass
class TokenPair:
    session: Session
    access_token: str
    refresh_token: str

    def to_dict(self) -> dict:
        return {
            "user_id": self.session.user_id,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "access_token_expire_on": to_utc_z(self.session.access_expire_on),
            "refresh_token_expire_on": to_utc_z(self.session.refresh_expire_on),
        }


@dataclass
class UserPermissionContext:
    """Who is calling and what their platform group allows."""
    user: User
    permission_id: str
    permissions: set[str]


class UserRepository(Repository):
    def __init__(self, session, access_ttl: timedelta, refresh_ttl: timedelta):
        super().__init__(session)
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    def _new_session(self, user_id: str, now: datetime) -> TokenPair:
        access_token = new_token()
        refresh_token = new_token()
        s = Session(
            user_id=user_id,
            access_token=hash_token(access_token),
            refresh_token=hash_token(refresh_token),
            access_expire_on=now + self.access_ttl,
            refresh_expire_on=now + self.refresh_ttl,
            created_at=now,
        )
        self.session.add(s)
        return TokenPair(session=s, access_token=access_token, refresh_token=refresh_token)

    def register(self, user: User) -> User:
        return self._save(user)

    def login(self, email: str, password: str) -> TokenPair:
        """
        Raises NotFoundError for unknown email, inactive user or wrong password
        alike, so callers can't tell which one failed.
        """
        user = (
            self.session.query(User)
            .filter(User.email == email, User.status == USER_ACTIVE)
            .first()
        )
        if user is None or not verify_password(password, user.password):
            raise NotFoundError("Invalid credentials")

        pair = self._new_session(user.id, utcnow())
        self._commit()
        return pair

    def logout(self, access_token: str) -> None:
        deleted = (
            self.session.query(Session)
            .filter(Session.access_token == hash_token(access_token))
            .delete(synchronize_session=False)
        )
        self._commit()
        if not deleted:
            raise NotFoundError("Session not found")

    def refresh_token(self, refresh_token: str) -> TokenPair:
        """
        Swap a refresh token for a brand-new pair.

        Read-old, write-new and delete-old share one commit: either the caller
        gets a new pair and the old session is gone, or nothing changes.
        """
        now = utcnow()
        old = (
            self.session.query(Session)
            .filter(Session.refresh_token == hash_token(refresh_token))
            .first()
        )
        if old is None or old.refresh_expire_on < now:
            raise NotFoundError("Refresh token not found")

        pair = self._new_session(old.user_id, now)
        self.session.delete(old)
        self._commit()
        return pair

    def get(self, user_id: str) -> User:
        user = self.session.query(User).filter_by(id=user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_by_email(self, email: str) -> User:
        user = self.session.query(User).filter_by(email=email).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update(self, user_id: str, patch: dict) -> User:
        user = self.get(user_id)
        for k, v in patch.items():
            if k in USER_MUTABLE_FIELDS:
                setattr(user, k, v)
        user.updated_at = utcnow()
        self._commit()
        return user

    def get_permission(self, access_token: str) -> UserPermissionContext | None:
        """Resolve an access token to its active user and permission group."""
        row = (
            self.session.query(User, UserPermission)
            .join(Session, Session.user_id == User.id)
            .join(UserPermission, UserPermission.id == User.permission_id)
            .filter(
                Session.access_token == hash_token(access_token),
                Session.access_expire_on > utcnow(),
                User.status == USER_ACTIVE,
            )
            .first()
        )
        if row is None:
            return None
        user, group = row
        return UserPermissionContext(user=user, permission_id=group.id, permissions=group.permissions)

    def get_permission_by_user_id(self, user_id: str) -> UserPermissionContext | None:
        row = (
            self.session.query(User, UserPermission)
            .join(UserPermission, UserPermission.id == User.permission_id)
            .filter(User.id == user_id, User.status == USER_ACTIVE)
            .first()
        )
        if row is None:
            return None
        user, group = row
        return UserPermissionContext(user=user, permission_id=group.id, permissions=group.permissions)

    def _settings(self) -> Settings | None:
        return self.session.query(Settings).filter_by(id=SETTINGS_ID).first()

    def is_sign_up_enabled(self) -> bool:
        # An un-seeded platform is closed
        s = self._settings()
        return bool(s and s.is_sign_up_enabled)

    def is_store_creation_enabled(self) -> bool:
        s = self._settings()
        return bool(s and s.is_store_creation_enabled)

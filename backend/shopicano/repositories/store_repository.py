"""
Store (tenant) and staff persistence.

A user is staff of at most one store; the staff row's permission group
decides what they may do inside it.
"""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError, NotFoundError
from ..models import Staff, Store, User, UserPermission
from ..models.stores import STORE_ACTIVE
from ..permissions import STORE_ADMIN_GROUP_ID
from ..time_utils import to_utc_z, utcnow
from .base import Repository


@dataclass
class StoreUserProfile:
    """A staff member's view of their store, as resolved per request."""
    store_id: str
    store_name: str
    store_status: str
    user_id: str
    permission_id: str
    permissions: set[str]
    is_creator: bool

    @property
    def is_store_active(self) -> bool:
        return self.store_status == STORE_ACTIVE

    def to_dict(self) -> dict:
        return {
            "store_id": self.store_id,
            "store_name": self.store_name,
            "store_status": self.store_status,
            "user_id": self.user_id,
            "permission_id": self.permission_id,
            "permissions": sorted(self.permissions),
            "is_creator": self.is_creator,
        }


def _staff_profile(user: User, staff: Staff) -> dict:
    return {
        "user_id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "profile_picture": user.profile_picture,
        "permission_id": staff.permission_id,
        "is_creator": staff.is_creator,
        "created_at": to_utc_z(staff.created_at),
    }


class StoreRepository(Repository):
    def create_store(self, store: Store, creator_user_id: str) -> Store:
        """Store and its creator's store-admin membership land in one commit."""
        try:
            self.session.add(store)
            self.session.flush()
            self.session.add(Staff(
                user_id=creator_user_id,
                store_id=store.id,
                permission_id=STORE_ADMIN_GROUP_ID,
                is_creator=True,
            ))
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self._commit()
        return store

    def find_store_by_id(self, store_id: str) -> Store:
        store = self.session.query(Store).filter_by(id=store_id).first()
        if store is None:
            raise NotFoundError("Store not found")
        return store

    def find_active_store(self, store_id: str) -> Store:
        store = self.find_store_by_id(store_id)
        if not store.is_active:
            raise NotFoundError("Store not found")
        return store

    def list_stores(self, offset: int, limit: int) -> list[Store]:
        return (
            self.session.query(Store)
            .order_by(Store.created_at.desc(), Store.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def update_status(self, store_id: str, status: str) -> Store:
        store = self.find_store_by_id(store_id)
        store.status = status
        store.updated_at = utcnow()
        self._commit()
        return store

    def get_store_user_profile(self, user_id: str) -> StoreUserProfile:
        row = (
            self.session.query(Staff, Store, UserPermission)
            .join(Store, Store.id == Staff.store_id)
            .join(UserPermission, UserPermission.id == Staff.permission_id)
            .filter(Staff.user_id == user_id)
            .first()
        )
        if row is None:
            raise NotFoundError("User is not staff of any store")
        staff, store, group = row
        return StoreUserProfile(
            store_id=store.id,
            store_name=store.name,
            store_status=store.status,
            user_id=staff.user_id,
            permission_id=group.id,
            permissions=group.permissions,
            is_creator=staff.is_creator,
        )

    def is_already_staff(self, user_id: str) -> bool:
        return self.session.query(Staff).filter_by(user_id=user_id).first() is not None

    def add_store_staff(self, staff: Staff) -> Staff:
        return self._save(staff)

    def _staff_query(self, store_id: str):
        return (
            self.session.query(User, Staff)
            .join(Staff, Staff.user_id == User.id)
            .filter(Staff.store_id == store_id)
            .order_by(User.name.asc(), User.id.asc())
        )

    def list_staffs(self, store_id: str, offset: int, limit: int) -> list[dict]:
        rows = self._staff_query(store_id).offset(offset).limit(limit).all()
        return [_staff_profile(u, s) for u, s in rows]

    def search_staffs(self, store_id: str, query: str, offset: int, limit: int) -> list[dict]:
        pattern = f"%{query}%"
        rows = (
            self._staff_query(store_id)
            .filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [_staff_profile(u, s) for u, s in rows]

    def _get_staff(self, store_id: str, user_id: str) -> Staff:
        staff = (
            self.session.query(Staff)
            .filter(Staff.store_id == store_id, Staff.user_id == user_id)
            .first()
        )
        if staff is None:
            raise NotFoundError("Staff not found")
        return staff

    def update_store_staff_permission(self, store_id: str, user_id: str, permission_id: str) -> Staff:
        staff = self._get_staff(store_id, user_id)
        if staff.is_creator:
            raise ConflictError("Store creator's permission cannot be changed")
        staff.permission_id = permission_id
        self._commit()
        return staff

    def delete_store_staff_permission(self, store_id: str, user_id: str) -> None:
        staff = self._get_staff(store_id, user_id)
        if staff.is_creator:
            raise ConflictError("Store creator cannot be removed")
        self.session.delete(staff)
        self._commit()

from __future__ import annotations

from ..errors import NotFoundError
from ..models import Settings
from ..models.settings import SETTINGS_ID
from ..time_utils import utcnow
from .base import Repository

SETTINGS_MUTABLE_FIELDS = {
    "name", "url", "tag_line", "is_active",
    "company_name", "company_address", "company_city", "company_country",
    "company_postcode", "company_email", "company_phone",
    "is_sign_up_enabled", "is_store_creation_enabled",
}


class SettingsRepository(Repository):
    def get(self) -> Settings:
        s = self.session.query(Settings).filter_by(id=SETTINGS_ID).first()
        if s is None:
            raise NotFoundError("Settings not found")
        return s

    def update(self, patch: dict) -> Settings:
        s = self.get()
        for k, v in patch.items():
            if k in SETTINGS_MUTABLE_FIELDS:
                setattr(s, k, v)
        s.updated_at = utcnow()
        self._commit()
        return s

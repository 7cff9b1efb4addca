from copy import deepcopy
from typing import Any, Dict
from sqlalchemy.orm import Session

from alcozero.models.user_settings import UserSettings
from alcozero.schemas.security import SecuritySettings
from alcozero.schemas.settings import Preferences


def default_security() -> Dict[str, Any]:
    return SecuritySettings().model_dump(mode="json")


def default_preferences() -> Dict[str, Any]:
    return Preferences().model_dump(mode="json")


def deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class CRUDUserSettings:
    def get_or_create(self, db: Session, *, admin_id: int) -> UserSettings:
        row = db.query(UserSettings).filter(UserSettings.admin_id == admin_id).first()
        if row is None:
            row = UserSettings(
                admin_id=admin_id,
                security=default_security(),
                preferences=default_preferences(),
            )
            db.add(row)
            db.flush()
        return row

    def security_for(self, db: Session, *, admin_id: int) -> SecuritySettings:
        row = self.get_or_create(db, admin_id=admin_id)
        return SecuritySettings(**deep_merge(default_security(), row.security or {}))

    def preferences_for(self, db: Session, *, admin_id: int) -> Preferences:
        row = self.get_or_create(db, admin_id=admin_id)
        return Preferences(**deep_merge(default_preferences(), row.preferences or {}))

    def merge_security(self, db: Session, *, admin_id: int, updates: Dict[str, Any]) -> SecuritySettings:
        row = self.get_or_create(db, admin_id=admin_id)
        merged = SecuritySettings(**deep_merge(deep_merge(default_security(), row.security or {}), updates))
        # reassign so the JSON column is marked dirty
        row.security = merged.model_dump(mode="json")
        db.add(row)
        db.flush()
        return merged

    def merge_preferences(self, db: Session, *, admin_id: int, updates: Dict[str, Any]) -> Preferences:
        row = self.get_or_create(db, admin_id=admin_id)
        merged = Preferences(**deep_merge(deep_merge(default_preferences(), row.preferences or {}), updates))
        row.preferences = merged.model_dump(mode="json")
        db.add(row)
        db.flush()
        return merged

    def delete_for_admin(self, db: Session, *, admin_id: int) -> bool:
        deleted = db.query(UserSettings).filter(UserSettings.admin_id == admin_id).delete(synchronize_session=False)
        return bool(deleted)


user_settings_crud = CRUDUserSettings()

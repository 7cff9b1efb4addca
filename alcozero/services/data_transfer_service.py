"""
Export, import and clear of an admin's own data (settings page).
"""
from typing import Any, Dict
from pydantic import ValidationError
from sqlalchemy.orm import Session

from alcozero.core.logging_config import get_logger
from alcozero.crud.alert import get_alerts
from alcozero.crud.device import device_crud
from alcozero.crud.device_log import get_logs
from alcozero.crud.user_settings import user_settings_crud
from alcozero.models.admin import Admin
from alcozero.schemas.alert import AlertResponse
from alcozero.schemas.device import DeviceCreate, DeviceResponse
from alcozero.schemas.device_log import DeviceLogResponse
from alcozero.schemas.settings import ImportPayload, ImportSettings, ProfileResponse
from common_utils import utcnow

logger = get_logger(__name__)

EXPORT_LIMIT = 1000
IMPORTABLE_PROFILE_FIELDS = ("name", "organization", "phone")
# columns an import may not carry over from another account
DEVICE_IMPORT_EXCLUDE = ("id", "admin_id", "created_at", "updated_at", "last_seen", "captured_images")


def export_filename() -> str:
    return f"alchozero-data-{utcnow().date().isoformat()}.json"


def export_user_data(db: Session, admin: Admin) -> Dict[str, Any]:
    devices = device_crud.query_for_admin(db, admin_id=admin.admin_id).all()
    hardware_ids = [device.device_id for device in devices]
    settings_row = user_settings_crud.get_or_create(db, admin_id=admin.admin_id)

    return {
        "profile": ProfileResponse.model_validate(admin, from_attributes=True).model_dump(mode="json"),
        "devices": [DeviceResponse.model_validate(d).model_dump(mode="json") for d in devices],
        "logs": [
            DeviceLogResponse.model_validate(log).model_dump(mode="json")
            for log in get_logs(db, limit=EXPORT_LIMIT, device_ids=hardware_ids)
        ],
        "alerts": [
            AlertResponse.model_validate(alert).model_dump(mode="json")
            for alert in get_alerts(db, limit=EXPORT_LIMIT, device_ids=hardware_ids)
        ],
        "settings": {
            "security": user_settings_crud.security_for(db, admin_id=admin.admin_id).model_dump(mode="json"),
            "preferences": user_settings_crud.preferences_for(db, admin_id=admin.admin_id).model_dump(mode="json"),
        },
        "exported_at": utcnow().isoformat(),
    }


def import_user_data(db: Session, admin: Admin, payload: ImportPayload) -> Dict[str, int]:
    """
    Merge an export back into the account. Devices are re-created without
    their ids; a device whose hardware id already exists is skipped, as is
    one that does not validate. Flushes only; the caller commits.
    """
    counts = {"profile_fields": 0, "devices_imported": 0, "devices_skipped": 0, "settings_merged": 0}

    for field in IMPORTABLE_PROFILE_FIELDS:
        value = (payload.profile or {}).get(field)
        if value:
            setattr(admin, field, value)
            counts["profile_fields"] += 1
    db.add(admin)

    existing = set(device_crud.hardware_ids_for_admin(db, admin_id=admin.admin_id))
    for raw in payload.devices or []:
        data = {k: v for k, v in raw.items() if k not in DEVICE_IMPORT_EXCLUDE}
        try:
            device_in = DeviceCreate(**data)
        except ValidationError as e:
            logger.warning(f"[DataImport] Skipping invalid device {raw.get('device_id')}: {e.error_count()} errors")
            counts["devices_skipped"] += 1
            continue
        if device_in.device_id in existing:
            counts["devices_skipped"] += 1
            continue
        device_crud.create_for_admin(db, admin_id=admin.admin_id, obj_in=device_in, driver_id=device_in.driver_id)
        existing.add(device_in.device_id)
        counts["devices_imported"] += 1

    imported = payload.settings or ImportSettings()
    if imported.security is not None:
        updates = imported.security.model_dump(exclude_none=True, mode="json")
        user_settings_crud.merge_security(db, admin_id=admin.admin_id, updates=updates)
        counts["settings_merged"] += 1
    if imported.preferences is not None:
        updates = imported.preferences.model_dump(exclude_none=True, mode="json")
        user_settings_crud.merge_preferences(db, admin_id=admin.admin_id, updates=updates)
        counts["settings_merged"] += 1

    db.flush()
    logger.info(f"[DataImport] Admin {admin.admin_id}: {counts}")
    return counts


def clear_user_data(db: Session, admin: Admin) -> None:
    """Drop stored settings and blank the profile fields; the account itself stays usable"""
    user_settings_crud.delete_for_admin(db, admin_id=admin.admin_id)
    admin.organization = None
    admin.phone = None
    admin.name = admin.email.split("@")[0]
    db.add(admin)
    db.flush()

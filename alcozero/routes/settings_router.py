import json
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.core.logging_config import get_logger
from alcozero.core.permissions import RoleEnum, normalize_role
from alcozero.core.severity import Severity
from alcozero.crud.admin import admin_crud
from alcozero.crud.user_settings import user_settings_crud
from alcozero.database.session import get_db
from alcozero.schemas.settings import ImportPayload, PreferencesUpdate, ProfileResponse, ProfileUpdate
from alcozero.services.audit_service import AuditService
from alcozero.services.data_transfer_service import (
    clear_user_data,
    export_filename,
    export_user_data,
    import_user_data,
)
from alcozero.utils.current_user import get_current_admin
from alcozero.utils.response_utils import ResponseWrapper, error_exception, handle_db_error, handle_http_error
from common_utils.auth.permission_checker import PermissionChecker, RoleChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/profile", status_code=status.HTTP_200_OK)
def get_profile(
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["settings.read"])),
):
    admin = get_current_admin(db, user_data)
    return ResponseWrapper.success(
        data=ProfileResponse.model_validate(admin, from_attributes=True),
        message="Profile",
    )


@router.put("/profile", status_code=status.HTTP_200_OK)
def update_profile(
    profile_in: ProfileUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["settings.update"])),
):
    """
    Update name, email, organization, phone and role. A role change is only
    applied when the caller is an admin; for anyone else it is dropped.
    """
    try:
        admin = get_current_admin(db, user_data)
        changes = profile_in.model_dump(exclude_unset=True)

        if "role" in changes:
            new_role = normalize_role(changes["role"])
            if normalize_role(admin.role) != RoleEnum.ADMIN.value or new_role not in {r.value for r in RoleEnum}:
                logger.warning(f"[ProfileUpdate] Ignoring role change to {changes['role']!r} by admin {admin.admin_id}")
                changes.pop("role")
            else:
                changes["role"] = new_role

        if changes.get("email"):
            changes["email"] = changes["email"].lower()
            existing = admin_crud.get_by_email(db, email=changes["email"])
            if existing and existing.admin_id != admin.admin_id:
                raise error_exception(status.HTTP_409_CONFLICT, "This email is already registered", "EMAIL_EXISTS")

        admin = admin_crud.update(db, db_obj=admin, obj_in=changes, commit=False)
        AuditService.log_event(
            db, admin.admin_id, "profile_update", "Profile updated",
            user_email=admin.email, audit_data={"changed": sorted(changes)}, request=request,
        )
        db.commit()
        db.refresh(admin)

        logger.info(f"[ProfileUpdate] Admin {admin.admin_id} updated {sorted(changes)}")
        return ResponseWrapper.updated(
            data=ProfileResponse.model_validate(admin, from_attributes=True),
            message="Profile updated successfully",
        )

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[ProfileUpdate] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[ProfileUpdate] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/preferences", status_code=status.HTTP_200_OK)
def get_preferences(
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["settings.read"])),
):
    try:
        preferences = user_settings_crud.preferences_for(db, admin_id=int(user_data["user_id"]))
        db.commit()
        return ResponseWrapper.success(data=preferences, message="Preferences")
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[Preferences] Unexpected error: {e}")
        raise handle_http_error(e)


@router.put("/preferences", status_code=status.HTTP_200_OK)
def update_preferences(
    preferences_in: PreferencesUpdate,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["settings.update"])),
):
    try:
        admin_id = int(user_data["user_id"])
        changes = preferences_in.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        preferences = user_settings_crud.merge_preferences(db, admin_id=admin_id, updates=changes)
        db.commit()

        logger.info(f"[Preferences] Admin {admin_id} updated {sorted(changes)}")
        return ResponseWrapper.updated(data=preferences, message="Preferences saved")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[Preferences] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[Preferences] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/export")
def export_data(
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["settings.read"])),
):
    """Everything the account owns as a JSON file download."""
    try:
        admin = get_current_admin(db, user_data)
        payload = export_user_data(db, admin)
        db.commit()

        logger.info(f"[DataExport] Admin {admin.admin_id} exported {len(payload['devices'])} devices")
        return Response(
            content=json.dumps(payload, indent=2),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
        )

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[DataExport] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[DataExport] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/import", status_code=status.HTTP_200_OK)
async def import_data(
    request: Request,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["settings.update"])),
):
    try:
        try:
            raw = await request.json()
            payload = ImportPayload.model_validate(raw)
        except (ValueError, ValidationError) as e:
            logger.warning(f"[DataImport] Rejected import from admin {user_data['user_id']}: {e}")
            raise error_exception(status.HTTP_400_BAD_REQUEST, "Invalid import file", "INVALID_IMPORT")

        admin = get_current_admin(db, user_data)
        counts = import_user_data(db, admin, payload)
        AuditService.log_event(
            db, admin.admin_id, "data_import", "Account data imported",
            user_email=admin.email, audit_data=counts, request=request,
        )
        db.commit()
        return ResponseWrapper.success(data=counts, message="Data imported successfully")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[DataImport] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[DataImport] Unexpected error: {e}")
        raise handle_http_error(e)


@router.delete("/data", status_code=status.HTTP_200_OK)
def clear_data(
    request: Request,
    db: Session = Depends(get_db),
    role_data=Depends(RoleChecker([RoleEnum.ADMIN.value])),
    user_data=Depends(PermissionChecker(["settings.delete"])),
):
    """Delete stored settings and reset the profile; the account stays usable."""
    try:
        admin = get_current_admin(db, user_data)
        clear_user_data(db, admin)
        AuditService.log_event(
            db, admin.admin_id, "data_clear", "Account data cleared",
            severity=Severity.WARNING, user_email=admin.email, request=request, force=True,
        )
        db.commit()

        logger.warning(f"[DataClear] Admin {admin.admin_id} cleared their data")
        return ResponseWrapper.deleted(message="All data cleared")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[DataClear] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[DataClear] Unexpected error: {e}")
        raise handle_http_error(e)

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.core.logging_config import get_logger
from alcozero.core.severity import Severity
from alcozero.crud.admin import admin_crud
from alcozero.crud.security_log import security_log_crud
from alcozero.crud.user_settings import user_settings_crud
from alcozero.database.session import get_db
from alcozero.schemas.auth import PasswordChangeRequest
from alcozero.schemas.security import SecurityLogResponse, SecuritySettingsUpdate
from alcozero.services.audit_service import AuditService
from alcozero.utils.current_user import get_current_admin
from alcozero.utils.response_utils import ResponseWrapper, error_exception, handle_db_error, handle_http_error
from common_utils.auth.permission_checker import PermissionChecker
from common_utils.auth.utils import verify_password

logger = get_logger(__name__)
router = APIRouter(prefix="/security", tags=["security"])


@router.get("/logs", status_code=status.HTTP_200_OK)
def get_security_logs(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["security.read"])),
):
    """The caller's security events, newest first."""
    try:
        logs = security_log_crud.get_for_admin(db, admin_id=int(user_data["user_id"]), limit=limit)
        return ResponseWrapper.success(
            data=[SecurityLogResponse.model_validate(log) for log in logs],
            message=f"{len(logs)} security events",
        )
    except SQLAlchemyError as e:
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"[SecurityLogs] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/settings", status_code=status.HTTP_200_OK)
def get_security_settings(
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["security.read"])),
):
    try:
        security = user_settings_crud.security_for(db, admin_id=int(user_data["user_id"]))
        db.commit()
        return ResponseWrapper.success(data=security, message="Security settings")
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[SecuritySettings] Unexpected error: {e}")
        raise handle_http_error(e)


@router.put("/settings", status_code=status.HTTP_200_OK)
def update_security_settings(
    settings_in: SecuritySettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["security.update"])),
):
    """Merge the given fields into the stored security settings."""
    try:
        admin_id = int(user_data["user_id"])
        changes = settings_in.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        security = user_settings_crud.merge_security(db, admin_id=admin_id, updates=changes)

        # turning audit logging off is itself recorded
        AuditService.log_event(
            db, admin_id, "security_settings_update", "Security settings updated",
            user_email=user_data.get("email"), audit_data={"changed": sorted(changes)},
            request=request, force="audit_logging" in changes,
        )
        db.commit()

        logger.info(f"[SecuritySettings] Admin {admin_id} updated {sorted(changes)}")
        return ResponseWrapper.updated(data=security, message="Security settings updated")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[SecuritySettings] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[SecuritySettings] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/password", status_code=status.HTTP_200_OK)
def change_password(
    password_in: PasswordChangeRequest,
    request: Request,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["security.update"])),
):
    try:
        if password_in.new_password != password_in.confirm_password:
            raise error_exception(status.HTTP_400_BAD_REQUEST, "New passwords do not match", "PASSWORD_MISMATCH")

        admin = get_current_admin(db, user_data)
        if not verify_password(password_in.current_password, admin.password):
            AuditService.log_event(
                db, admin.admin_id, "password_change_failed", "Password change rejected: wrong current password",
                severity=Severity.WARNING, user_email=admin.email, request=request,
            )
            db.commit()
            raise error_exception(
                status.HTTP_400_BAD_REQUEST, "Current password is incorrect", "INVALID_CURRENT_PASSWORD"
            )

        admin_crud.set_password(db, db_obj=admin, new_password=password_in.new_password)
        AuditService.log_event(
            db, admin.admin_id, "password_change", "Password changed",
            user_email=admin.email, request=request,
        )
        db.commit()

        logger.info(f"[PasswordChange] Admin {admin.admin_id} changed password")
        return ResponseWrapper.success(message="Password updated successfully")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[PasswordChange] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[PasswordChange] Unexpected error: {e}")
        raise handle_http_error(e)

from fastapi import status
from sqlalchemy.orm import Session

from alcozero.crud.admin import admin_crud
from alcozero.models.admin import Admin
from alcozero.utils.response_utils import error_exception


def get_current_admin(db: Session, user_data: dict) -> Admin:
    """Admin row behind a validated token; a deleted or disabled account is rejected"""
    admin = admin_crud.get(db, int(user_data["user_id"]))
    if not admin:
        raise error_exception(status.HTTP_401_UNAUTHORIZED, "Account no longer exists", "INVALID_TOKEN")
    if not admin.is_active:
        raise error_exception(status.HTTP_403_FORBIDDEN, "Account is inactive", "ACCOUNT_INACTIVE")
    return admin

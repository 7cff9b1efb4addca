from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.config import settings
from alcozero.core.logging_config import get_logger
from alcozero.core.permissions import permissions_for_role
from alcozero.core.severity import Severity
from alcozero.crud.admin import admin_crud
from alcozero.crud.user_settings import user_settings_crud
from alcozero.database.session import get_db
from alcozero.models.admin import Admin
from alcozero.schemas.auth import AdminResponse, LoginRequest, SignupRequest, TokenResponse
from alcozero.services.audit_service import AuditService
from alcozero.utils.current_user import get_current_admin
from alcozero.utils.response_utils import ResponseWrapper, error_exception, handle_db_error, handle_http_error
from common_utils import utcnow
from common_utils.auth.token_validation import revocation_list, validate_bearer_token
from common_utils.auth.utils import create_access_token, verify_password

logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)


def issue_token(admin: Admin) -> TokenResponse:
    permissions = permissions_for_role(admin.role)
    token = create_access_token(
        user_id=str(admin.admin_id),
        user_type="admin",
        custom_claims={
            "email": admin.email,
            "role": admin.role,
            "permissions": permissions,
        },
    )
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        admin=AdminResponse.model_validate(admin, from_attributes=True),
        permissions=permissions,
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    signup_in: SignupRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Create an admin account with default security settings and preferences,
    and sign it in.
    """
    try:
        if admin_crud.get_by_email(db, email=signup_in.email):
            raise error_exception(
                status.HTTP_409_CONFLICT,
                "This email is already registered. Please login instead.",
                "EMAIL_EXISTS",
            )

        admin = admin_crud.create_with_password(db, obj_in=signup_in)
        user_settings_crud.get_or_create(db, admin_id=admin.admin_id)
        AuditService.log_event(
            db, admin.admin_id, "signup", "Account created",
            user_email=admin.email, request=request,
        )
        db.commit()
        db.refresh(admin)

        logger.info(f"[Signup] Admin {admin.admin_id} registered with email {admin.email}")
        return ResponseWrapper.created(data=issue_token(admin), message="Account created successfully")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[Signup] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[Signup] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/login")
def login(
    login_in: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        admin = admin_crud.get_by_email(db, email=login_in.email)
        if not admin or not verify_password(login_in.password, admin.password):
            logger.warning(f"[Login] Failed sign-in for {login_in.email}")
            if admin:
                AuditService.log_event(
                    db, admin.admin_id, "login_failed", "Failed sign-in attempt",
                    severity=Severity.WARNING, user_email=admin.email, request=request,
                )
                db.commit()
            raise error_exception(status.HTTP_401_UNAUTHORIZED, "Invalid email or password", "INVALID_CREDENTIALS")

        if not admin.is_active:
            raise error_exception(status.HTTP_403_FORBIDDEN, "Account is inactive", "ACCOUNT_INACTIVE")

        admin.last_login_at = utcnow()
        AuditService.log_event(
            db, admin.admin_id, "login", "Signed in",
            user_email=admin.email, request=request,
        )
        db.commit()
        db.refresh(admin)

        logger.info(f"[Login] Admin {admin.admin_id} signed in")
        return ResponseWrapper.success(data=issue_token(admin), message="Login successful")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[Login] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[Login] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/logout")
def logout(
    request: Request,
    db: Session = Depends(get_db),
    user_data=Depends(validate_bearer_token(use_cache=True)),
):
    """Revoke the presented token; later requests with it get TOKEN_REVOKED."""
    try:
        revocation_list.revoke(user_data["token_payload"])
        AuditService.log_event(
            db, int(user_data["user_id"]), "logout", "Signed out",
            user_email=user_data.get("email"), request=request,
        )
        db.commit()
        logger.info(f"[Logout] Admin {user_data['user_id']} signed out")
        return ResponseWrapper.success(message="Logged out successfully")

    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"[Logout] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/me")
def me(
    db: Session = Depends(get_db),
    user_data=Depends(validate_bearer_token(use_cache=True)),
):
    admin = get_current_admin(db, user_data)
    return ResponseWrapper.success(
        data={
            "admin": AdminResponse.model_validate(admin, from_attributes=True),
            "role": admin.role,
            "permissions": permissions_for_role(admin.role),
        },
        message="Current session",
    )

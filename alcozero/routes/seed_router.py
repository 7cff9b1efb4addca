from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.core.logging_config import get_logger
from alcozero.database.session import get_db
from alcozero.seed.seed_data import seed_all
from alcozero.utils.current_user import get_current_admin
from alcozero.utils.response_utils import ResponseWrapper, handle_db_error, handle_http_error
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(tags=["seed"])


@router.post("/seed-database", status_code=status.HTTP_201_CREATED)
def seed_database(
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["seed.create"])),
):
    """
    Sample devices ALCH-001..ALCH-005 for the caller plus sample logs and
    alerts. Devices that already exist are left alone.
    """
    try:
        admin = get_current_admin(db, user_data)
        result = seed_all(db, admin.admin_id)
        return ResponseWrapper.created(data=result, message="Sample data created")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[Seed] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[Seed] Unexpected error: {e}")
        raise handle_http_error(e)

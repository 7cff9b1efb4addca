from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.core.logging_config import get_logger
from alcozero.database.session import get_db
from alcozero.schemas.analytics import DailyStatisticResponse
from alcozero.services.maintenance_service import cleanup_old_logs, generate_daily_statistics
from alcozero.utils.response_utils import ResponseWrapper, handle_db_error, handle_http_error
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/cleanup", status_code=status.HTTP_200_OK)
def run_cleanup(
    retention_days: Optional[int] = Query(None, ge=1, le=3650),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["maintenance.run"])),
):
    """Delete device logs older than the retention window (LOG_RETENTION_DAYS by default)."""
    try:
        deleted = cleanup_old_logs(db, retention_days=retention_days)
        logger.info(f"[MaintenanceCleanup] Run by admin {user_data['user_id']}")
        return ResponseWrapper.success(data={"deleted": deleted}, message=f"Deleted {deleted} old log entries")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[MaintenanceCleanup] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[MaintenanceCleanup] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/daily-stats", status_code=status.HTTP_200_OK)
def run_daily_statistics(
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["maintenance.run"])),
):
    try:
        row = generate_daily_statistics(db)
        return ResponseWrapper.success(
            data=DailyStatisticResponse.model_validate(row),
            message="Daily statistics generated",
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[MaintenanceDailyStats] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[MaintenanceDailyStats] Unexpected error: {e}")
        raise handle_http_error(e)

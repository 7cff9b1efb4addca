from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.config import settings
from alcozero.core.logging_config import get_logger
from alcozero.core.severity import log_status
from alcozero.crud.device_log import create_log, get_logs
from alcozero.database.session import get_db
from alcozero.schemas.device_log import DeviceLogBatchCreate, DeviceLogCreate, DeviceLogResponse
from alcozero.utils.response_utils import ResponseWrapper, error_exception, handle_db_error, handle_http_error
from common_utils import parse_timestamp
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/logs", tags=["device logs"])


def _record(db: Session, log_in: DeviceLogCreate):
    try:
        timestamp = parse_timestamp(log_in.timestamp)
    except (TypeError, ValueError, OverflowError, OSError):
        raise error_exception(
            status.HTTP_400_BAD_REQUEST,
            f"Invalid timestamp: {log_in.timestamp!r}",
            "VALIDATION_ERROR",
        )
    return create_log(
        db,
        device_id=log_in.device_id or settings.DEFAULT_DEVICE_ID,
        alcohol_level=log_in.alcohol_level,
        engine=log_in.engine,
        status=log_status(log_in.alcohol_level),
        source="manual",
        timestamp=timestamp,
    )


@router.get("/", status_code=status.HTTP_200_OK)
def list_logs(
    limit: int = Query(50, ge=1, le=500),
    device_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["log.read"])),
):
    """Most recent readings first."""
    try:
        logs = get_logs(db, limit=limit, device_id=device_id)
        return ResponseWrapper.success(
            data={"items": [DeviceLogResponse.model_validate(log) for log in logs]},
            message=f"{len(logs)} logs fetched",
        )
    except SQLAlchemyError as e:
        logger.exception(f"[LogList] DB error: {e}")
        raise handle_db_error(e)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_device_log(
    log_in: DeviceLogCreate,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["log.create"])),
):
    try:
        log = _record(db, log_in)
        db.commit()
        db.refresh(log)
        logger.info(f"[LogCreate] {log.device_id}: {log.alcohol_level:.3f} -> {log.status.value}")
        return ResponseWrapper.created(data={"log": DeviceLogResponse.model_validate(log)}, message="Log saved")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[LogCreate] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[LogCreate] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/batch", status_code=status.HTTP_201_CREATED)
def create_device_logs_batch(
    batch_in: DeviceLogBatchCreate,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["log.create"])),
):
    """All readings are stored in one transaction."""
    try:
        for log_in in batch_in.logs:
            _record(db, log_in)
        db.commit()
        logger.info(f"[LogBatch] {len(batch_in.logs)} logs saved by admin {user_data['user_id']}")
        return ResponseWrapper.created(data={"count": len(batch_in.logs)}, message="Logs saved")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[LogBatch] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[LogBatch] Unexpected error: {e}")
        raise handle_http_error(e)

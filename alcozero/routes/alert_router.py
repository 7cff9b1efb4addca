from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.config import settings
from alcozero.core.logging_config import get_logger
from alcozero.core.severity import SEVERITY_FILTERS
from alcozero.crud.alert import count_since, create_alert, get_alert, get_alerts, update_alert_status
from alcozero.database.session import get_db
from alcozero.firebase.device_status import FirebaseUnavailableError, device_status_store
from alcozero.models.alert import AlertStatusEnum, AlertTypeEnum
from alcozero.schemas.alert import AlertResponse, AlertStatusUpdate, AlertTriggerRequest
from alcozero.utils.response_utils import ResponseWrapper, error_exception, handle_db_error, handle_http_error
from common_utils import days_ago
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("/", status_code=status.HTTP_200_OK)
def list_alerts(
    limit: int = Query(20, ge=1, le=500),
    severity: str = Query("all", description="all, critical, warning or info"),
    status_filter: Optional[AlertStatusEnum] = Query(None, alias="status"),
    device_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["alert.read"])),
):
    """
    Newest alerts first. Severity is derived from the alcohol level:
    critical > 0.3, warning > 0.15, info otherwise.
    """
    try:
        if severity not in SEVERITY_FILTERS:
            raise error_exception(
                status.HTTP_400_BAD_REQUEST,
                f"Invalid severity filter '{severity}'",
                "VALIDATION_ERROR",
                {"allowed": list(SEVERITY_FILTERS)},
            )

        alerts = get_alerts(db, limit=limit, severity=severity, status=status_filter, device_id=device_id)
        return ResponseWrapper.success(
            data={
                "items": [AlertResponse.model_validate(alert) for alert in alerts],
                "recent_count": count_since(db, since=days_ago(1)),
            },
            message=f"{len(alerts)} alerts fetched",
        )

    except SQLAlchemyError as e:
        logger.exception(f"[AlertList] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"[AlertList] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/trigger", status_code=status.HTTP_201_CREATED)
def trigger_alert(
    trigger_in: AlertTriggerRequest,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["alert.create"])),
):
    """
    Raise a MANUAL alert. Missing level and engine are taken from the live
    device status when it can be read.
    """
    try:
        device_id = trigger_in.device_id or settings.DEFAULT_DEVICE_ID
        alcohol_level = trigger_in.alcohol_level
        engine = trigger_in.engine

        if alcohol_level is None or engine is None:
            try:
                live = device_status_store.get_raw(device_id) or {}
            except FirebaseUnavailableError as e:
                logger.warning(f"[AlertTrigger] Live status unavailable for {device_id}: {e}")
                live = {}
            if alcohol_level is None:
                alcohol_level = live.get("alcoholLevel") or 0.0
            if engine is None:
                engine = live.get("engine") or "UNKNOWN"

        alert = create_alert(
            db,
            device_id=device_id,
            alcohol_level=alcohol_level,
            engine=engine,
            alert_type=AlertTypeEnum.MANUAL,
            message=f"Manual alert triggered for device {device_id}",
            triggered_by=int(user_data["user_id"]),
        )
        db.commit()
        db.refresh(alert)

        logger.info(f"[AlertTrigger] Alert {alert.alert_id} for {device_id} by admin {user_data['user_id']}")
        return ResponseWrapper.created(data={"alert": AlertResponse.model_validate(alert)}, message="Alert triggered")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[AlertTrigger] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[AlertTrigger] Unexpected error: {e}")
        raise handle_http_error(e)


@router.patch("/{alert_id}/status", status_code=status.HTTP_200_OK)
def change_alert_status(
    alert_id: int,
    status_in: AlertStatusUpdate,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["alert.update"])),
):
    try:
        alert = get_alert(db, alert_id)
        if not alert:
            raise error_exception(status.HTTP_404_NOT_FOUND, f"Alert {alert_id} not found", "ALERT_NOT_FOUND")

        alert = update_alert_status(db, alert=alert, status=status_in.status)
        db.commit()
        db.refresh(alert)

        logger.info(f"[AlertStatus] Alert {alert_id} -> {status_in.status.value}")
        return ResponseWrapper.updated(data={"alert": AlertResponse.model_validate(alert)}, message="Alert status updated")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[AlertStatus] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[AlertStatus] Unexpected error: {e}")
        raise handle_http_error(e)

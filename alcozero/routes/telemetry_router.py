from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.core.logging_config import get_logger
from alcozero.database.session import get_db
from alcozero.firebase.device_status import FirebaseUnavailableError
from alcozero.schemas.monitor import TelemetryReading
from alcozero.services.telemetry_service import telemetry_service
from alcozero.utils.response_utils import ResponseWrapper, error_exception, handle_db_error, handle_http_error
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/telemetry", tags=["telemetry"])


@router.post("/{device_id}", status_code=status.HTTP_202_ACCEPTED)
def push_reading(
    device_id: str,
    reading: TelemetryReading,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["telemetry.create"])),
):
    """
    Reading pushed by an in-vehicle unit. The live node is updated, the
    reading is logged, and threshold crossings raise an AUTO alert.
    """
    try:
        result = telemetry_service.process_update(
            db,
            device_id,
            alcohol_level=reading.alcohol_level,
            engine=reading.engine,
            connected=reading.connected,
        )
        return ResponseWrapper.success(data=result, message="Reading accepted")

    except FirebaseUnavailableError as e:
        db.rollback()
        logger.error(f"[Telemetry] Live store unavailable for {device_id}: {e}")
        raise error_exception(status.HTTP_503_SERVICE_UNAVAILABLE, "Real-time database unavailable", "FIREBASE_UNAVAILABLE")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[Telemetry] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[Telemetry] Unexpected error: {e}")
        raise handle_http_error(e)

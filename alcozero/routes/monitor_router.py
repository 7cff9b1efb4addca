import asyncio
import json
from typing import AsyncIterator, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.config import settings
from alcozero.core.logging_config import get_logger
from alcozero.database.session import get_db
from alcozero.firebase.device_status import DeviceStatusStore, FirebaseUnavailableError, device_status_store
from alcozero.crud.engine_log import get_engine_logs
from alcozero.schemas.monitor import DeviceStatusSnapshot, DeviceStatusUpdate, EngineLogResponse
from alcozero.services.telemetry_service import telemetry_service
from alcozero.utils.response_utils import ResponseWrapper, error_exception, handle_db_error, handle_http_error
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/monitor", tags=["real-time monitor"])


def _comparable(snapshot: dict) -> dict:
    # a missing node is stamped with "now" on every read
    if snapshot.get("connected"):
        return snapshot
    return {k: v for k, v in snapshot.items() if k != "timestamp"}


async def status_events(
    device_id: str,
    store: DeviceStatusStore,
    poll_seconds: float,
    request: Optional[Request] = None,
    max_events: Optional[int] = None,
) -> AsyncIterator[str]:
    """Server-sent events: the snapshot on connect, then again on every change."""
    last = None
    sent = 0
    while True:
        if request is not None and await request.is_disconnected():
            logger.info(f"[MonitorStream] Client left stream for {device_id}")
            return

        snapshot = await asyncio.to_thread(store.get_status, device_id)
        if last is None or _comparable(snapshot) != _comparable(last):
            last = snapshot
            sent += 1
            yield f"event: status\ndata: {json.dumps(snapshot)}\n\n"
            if max_events is not None and sent >= max_events:
                return

        await asyncio.sleep(poll_seconds)


@router.get("/", status_code=status.HTTP_200_OK)
def get_default_device_status(
    user_data=Depends(PermissionChecker(["monitor.read"])),
):
    snapshot = device_status_store.get_status(settings.DEFAULT_DEVICE_ID)
    return ResponseWrapper.success(data=DeviceStatusSnapshot(**snapshot), message="Live device status")


@router.get("/{device_id}", status_code=status.HTTP_200_OK)
def get_device_status(
    device_id: str,
    user_data=Depends(PermissionChecker(["monitor.read"])),
):
    """Normalized live status; read failures come back as engine ERROR, disconnected."""
    snapshot = device_status_store.get_status(device_id)
    return ResponseWrapper.success(data=DeviceStatusSnapshot(**snapshot), message="Live device status")


@router.get("/{device_id}/stream")
async def stream_device_status(
    device_id: str,
    request: Request,
    user_data=Depends(PermissionChecker(["monitor.read"])),
):
    logger.info(f"[MonitorStream] Admin {user_data['user_id']} subscribed to {device_id}")
    return StreamingResponse(
        status_events(device_id, device_status_store, settings.MONITOR_POLL_SECONDS, request=request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/{device_id}/engine-logs", status_code=status.HTTP_200_OK)
def list_engine_logs(
    device_id: str,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["monitor.read"])),
):
    """Engine lock/unlock history, newest first."""
    try:
        entries = get_engine_logs(db, device_id=device_id, limit=limit)
        return ResponseWrapper.success(
            data={"items": [EngineLogResponse.model_validate(e) for e in entries]},
            message="Engine history retrieved",
        )
    except SQLAlchemyError as e:
        logger.exception(f"[EngineLogs] DB error: {e}")
        raise handle_db_error(e)


@router.put("/{device_id}/status", status_code=status.HTTP_200_OK)
def update_device_status(
    device_id: str,
    status_in: DeviceStatusUpdate,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["monitor.update"])),
):
    """Dashboard-side status write; the telemetry rules run on the change."""
    try:
        result = telemetry_service.process_update(
            db,
            device_id,
            alcohol_level=status_in.alcohol_level,
            engine=status_in.engine,
            connected=status_in.connected,
        )
        logger.info(f"[MonitorUpdate] {device_id} updated by admin {user_data['user_id']}")
        return ResponseWrapper.updated(data=result, message="Device status updated")

    except FirebaseUnavailableError as e:
        db.rollback()
        logger.error(f"[MonitorUpdate] Live store unavailable: {e}")
        raise error_exception(status.HTTP_503_SERVICE_UNAVAILABLE, "Real-time database unavailable", "FIREBASE_UNAVAILABLE")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[MonitorUpdate] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[MonitorUpdate] Unexpected error: {e}")
        raise handle_http_error(e)

from typing import Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.config import settings
from alcozero.core.logging_config import get_logger
from alcozero.core.severity import Severity
from alcozero.crud.device import device_crud
from alcozero.crud.device_log import get_logs
from alcozero.database.session import get_db
from alcozero.models.device import Device, DeviceStatusEnum
from alcozero.schemas.device import DeviceCreate, DeviceResponse, DeviceUpdate
from alcozero.schemas.device_log import DeviceLogResponse
from alcozero.services.analytics_service import device_statistics
from alcozero.services.audit_service import AuditService
from alcozero.services.driver_id import generate_driver_id
from alcozero.services.image_service import ImageUploadError, image_service
from alcozero.utils.file_utils import image_file_validator
from alcozero.utils.pagination import paginate_query
from alcozero.utils.response_utils import (
    ResponseWrapper,
    error_exception,
    handle_db_error,
    handle_http_error,
    validate_pagination_params,
)
from common_utils import utcnow
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/devices", tags=["devices"])

DEVICE_STATUS_FILTERS = ("all",) + tuple(s.value for s in DeviceStatusEnum)


def _admin_id(user_data: dict) -> int:
    return int(user_data["user_id"])


def get_owned_device(db: Session, admin_id: int, id: int) -> Device:
    device = device_crud.get_for_admin(db, admin_id=admin_id, id=id)
    if not device:
        raise error_exception(status.HTTP_404_NOT_FOUND, f"Device {id} not found", "DEVICE_NOT_FOUND")
    return device


def _device_payload(device: Device) -> dict:
    return {"device": DeviceResponse.model_validate(device, from_attributes=True)}


async def _upload(file: UploadFile) -> dict:
    content = await file.read()
    try:
        return await image_service.upload_image(file.filename, content, file.content_type)
    except ImageUploadError as e:
        raise error_exception(status.HTTP_502_BAD_GATEWAY, f"Upload failed: {e}", "UPLOAD_FAILED")


# ---------------------------
# LIST
# ---------------------------
@router.get("/", status_code=status.HTTP_200_OK)
def list_devices(
    search: Optional[str] = Query(None, description="Substring of device name or device id"),
    status_filter: Optional[str] = Query("all", alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.read"])),
):
    """
    The caller's devices, newest first, filtered by ``search`` and
    ``status``. Stats are computed over all of the caller's devices.
    """
    try:
        if status_filter not in DEVICE_STATUS_FILTERS:
            raise error_exception(
                status.HTTP_400_BAD_REQUEST,
                f"Invalid status filter '{status_filter}'",
                "VALIDATION_ERROR",
                {"allowed": list(DEVICE_STATUS_FILTERS)},
            )

        admin_id = _admin_id(user_data)
        query = device_crud.query_for_admin(db, admin_id=admin_id, search=search, status=status_filter)
        total, items = paginate_query(query, skip=skip, limit=limit)
        page, per_page = validate_pagination_params(skip, limit)

        logger.info(f"[DeviceList] admin={admin_id} search={search!r} status={status_filter} -> {total}")
        return ResponseWrapper.success(
            data={
                "items": [DeviceResponse.model_validate(d, from_attributes=True) for d in items],
                "total": total,
                "page": page,
                "per_page": per_page,
                "stats": device_crud.stats_for_admin(db, admin_id=admin_id),
            },
            message="Devices fetched successfully",
        )

    except SQLAlchemyError as e:
        logger.exception(f"[DeviceList] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"[DeviceList] Unexpected error: {e}")
        raise handle_http_error(e)


# ---------------------------
# DRIVER ID
# ---------------------------
@router.post("/driver-id", status_code=status.HTTP_200_OK)
def next_driver_id(
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.create", "device.update"])),
):
    driver_id = generate_driver_id(db)
    logger.info(f"[DriverId] Issued {driver_id} to admin {user_data['user_id']}")
    return ResponseWrapper.success(data={"driver_id": driver_id}, message="Driver id generated")


# ---------------------------
# CREATE
# ---------------------------
@router.post("/", status_code=status.HTTP_201_CREATED)
def create_device(
    device_in: DeviceCreate,
    request: Request,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.create"])),
):
    """
    Create a device for the caller. A driver id is generated when none is
    supplied; vehicle details are optional.
    """
    try:
        admin_id = _admin_id(user_data)

        if device_crud.get_by_hardware_id(db, admin_id=admin_id, device_id=device_in.device_id):
            raise error_exception(
                status.HTTP_409_CONFLICT,
                f"Device '{device_in.device_id}' is already registered",
                "DUPLICATE_RESOURCE",
            )

        driver_id = device_in.driver_id or generate_driver_id(db)
        device = device_crud.create_for_admin(db, admin_id=admin_id, obj_in=device_in, driver_id=driver_id)
        AuditService.log_event(
            db, admin_id, "device_create", f"Device {device.device_id} added",
            user_email=user_data.get("email"), audit_data={"device_id": device.device_id}, request=request,
        )
        db.commit()
        db.refresh(device)

        logger.info(f"[DeviceCreate] Device {device.id} ({device.device_id}) created by admin {admin_id}")
        return ResponseWrapper.created(data=_device_payload(device), message="Device added successfully")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[DeviceCreate] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[DeviceCreate] Unexpected error: {e}")
        raise handle_http_error(e)


# ---------------------------
# GET / UPDATE / DELETE
# ---------------------------
@router.get("/{id}", status_code=status.HTTP_200_OK)
def get_device(
    id: int,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.read"])),
):
    device = get_owned_device(db, _admin_id(user_data), id)
    return ResponseWrapper.success(data=_device_payload(device), message=f"Device {id} fetched successfully")


@router.put("/{id}", status_code=status.HTTP_200_OK)
def update_device(
    id: int,
    device_in: DeviceUpdate,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.update"])),
):
    """Partial update; only fields present in the body change."""
    try:
        admin_id = _admin_id(user_data)
        device = get_owned_device(db, admin_id, id)

        new_hw_id = device_in.device_id
        if new_hw_id and new_hw_id != device.device_id and device_crud.get_by_hardware_id(db, admin_id=admin_id, device_id=new_hw_id):
            raise error_exception(
                status.HTTP_409_CONFLICT,
                f"Device '{new_hw_id}' is already registered",
                "DUPLICATE_RESOURCE",
            )

        device = device_crud.update(db, db_obj=device, obj_in=device_in)
        logger.info(f"[DeviceUpdate] Device {id} updated by admin {admin_id}")
        return ResponseWrapper.updated(data=_device_payload(device), message="Device updated successfully")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[DeviceUpdate] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[DeviceUpdate] Unexpected error: {e}")
        raise handle_http_error(e)


@router.delete("/{id}", status_code=status.HTTP_200_OK)
def delete_device(
    id: int,
    request: Request,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.delete"])),
):
    try:
        admin_id = _admin_id(user_data)
        device = get_owned_device(db, admin_id, id)
        hardware_id = device.device_id

        device_crud.remove(db, id=device.id, commit=False)
        AuditService.log_event(
            db, admin_id, "device_delete", f"Device {hardware_id} removed",
            severity=Severity.WARNING, user_email=user_data.get("email"),
            audit_data={"device_id": hardware_id}, request=request,
        )
        db.commit()

        logger.info(f"[DeviceDelete] Device {id} ({hardware_id}) deleted by admin {admin_id}")
        return ResponseWrapper.deleted(message="Device deleted successfully")

    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[DeviceDelete] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[DeviceDelete] Unexpected error: {e}")
        raise handle_http_error(e)


# ---------------------------
# READINGS
# ---------------------------
@router.get("/{id}/logs", status_code=status.HTTP_200_OK)
def get_device_logs(
    id: int,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.read"])),
):
    device = get_owned_device(db, _admin_id(user_data), id)
    logs = get_logs(db, limit=limit, device_id=device.device_id)
    return ResponseWrapper.success(
        data={"items": [DeviceLogResponse.model_validate(log) for log in logs], "device_id": device.device_id},
        message=f"Logs for device {device.device_id}",
    )


@router.get("/{id}/statistics", status_code=status.HTTP_200_OK)
def get_device_statistics(
    id: int,
    days: int = Query(7, ge=1, le=365),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.read", "analytics.read"])),
):
    device = get_owned_device(db, _admin_id(user_data), id)
    return ResponseWrapper.success(
        data=device_statistics(db, device.device_id, days=days),
        message=f"Statistics for device {device.device_id} over {days} days",
    )


# ---------------------------
# IMAGES
# ---------------------------
@router.post("/{id}/driver-photo", status_code=status.HTTP_200_OK)
async def upload_driver_photo(
    id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.update"])),
):
    try:
        device = get_owned_device(db, _admin_id(user_data), id)
        await image_file_validator(file)
        uploaded = await _upload(file)

        device.driver_photo = uploaded["url"]
        db.commit()
        db.refresh(device)

        logger.info(f"[DriverPhoto] Device {id} photo set to {uploaded['public_id']}")
        return ResponseWrapper.updated(data=_device_payload(device), message="Driver photo uploaded successfully")

    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[DriverPhoto] Unexpected error: {e}")
        raise handle_http_error(e)


@router.post("/{id}/images", status_code=status.HTTP_201_CREATED)
async def add_captured_image(
    id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.update"])),
):
    """Newest image first; only the latest MAX_CAPTURED_IMAGES are kept."""
    try:
        device = get_owned_device(db, _admin_id(user_data), id)
        await image_file_validator(file)
        uploaded = await _upload(file)

        entry = {"url": uploaded["url"], "public_id": uploaded["public_id"], "timestamp": utcnow().isoformat()}
        # reassign so the JSON column is marked dirty
        device.captured_images = ([entry] + list(device.captured_images or []))[: settings.MAX_CAPTURED_IMAGES]
        db.commit()
        db.refresh(device)

        logger.info(f"[CapturedImage] Device {id} now holds {len(device.captured_images)} images")
        return ResponseWrapper.created(data=_device_payload(device), message="Image captured successfully")

    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[CapturedImage] Unexpected error: {e}")
        raise handle_http_error(e)


@router.delete("/{id}/images/{index}", status_code=status.HTTP_200_OK)
def delete_captured_image(
    id: int,
    index: int,
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["device.update"])),
):
    try:
        device = get_owned_device(db, _admin_id(user_data), id)
        images = list(device.captured_images or [])
        if index < 0 or index >= len(images):
            raise error_exception(status.HTTP_404_NOT_FOUND, f"No captured image at index {index}", "IMAGE_NOT_FOUND")

        images.pop(index)
        device.captured_images = images
        db.commit()
        db.refresh(device)
        return ResponseWrapper.updated(data=_device_payload(device), message="Image removed")

    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[CapturedImage] Unexpected error removing image: {e}")
        raise handle_http_error(e)

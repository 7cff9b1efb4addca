from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, List, Any, Dict
from datetime import datetime

from alcozero.models.device import DeviceStatusEnum
from alcozero.services.image_service import get_optimized_image_url
from alcozero.utils.location import parse_location

_OPTIONAL_TEXT = (
    "location", "driver_id", "driver_name", "driver_photo", "license_no",
    "contact_number", "vehicle_name", "vehicle_number",
)


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class CapturedImage(BaseModel):
    url: str
    public_id: Optional[str] = None
    timestamp: str
    thumbnail_url: Optional[str] = None

    @model_validator(mode="after")
    def fill_thumbnail(self):
        if self.thumbnail_url is None:
            self.thumbnail_url = get_optimized_image_url(self.url)
        return self


class DeviceBase(BaseModel):
    name: str = Field(..., max_length=150)
    device_id: str = Field(..., max_length=100)
    location: Optional[str] = None
    status: DeviceStatusEnum = DeviceStatusEnum.ACTIVE
    curr_location: Optional[Dict[str, float]] = None

    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_age: Optional[int] = Field(None, ge=16, le=120)
    driver_photo: Optional[str] = None
    license_no: Optional[str] = None
    contact_number: Optional[str] = None

    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None

    @field_validator("name", "device_id")
    @classmethod
    def required_not_blank(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Device name and device id are required")
        return v

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def optional_blank(cls, v):
        return _blank_to_none(v)

    @field_validator("curr_location", mode="before")
    @classmethod
    def normalize_location(cls, v):
        return parse_location(v)


class DeviceCreate(DeviceBase):
    battery_level: int = Field(100, ge=0, le=100)
    firmware_version: str = "1.0.0"


class DeviceUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=150)
    device_id: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = None
    status: Optional[DeviceStatusEnum] = None
    battery_level: Optional[int] = Field(None, ge=0, le=100)
    firmware_version: Optional[str] = None
    curr_location: Optional[Dict[str, float]] = None

    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_age: Optional[int] = Field(None, ge=16, le=120)
    driver_photo: Optional[str] = None
    license_no: Optional[str] = None
    contact_number: Optional[str] = None

    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None

    @field_validator("name", "device_id", "status", "battery_level", "firmware_version", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("name", "device_id")
    @classmethod
    def required_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Device name and device id cannot be blank")
        return v

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def optional_blank(cls, v):
        return _blank_to_none(v)

    @field_validator("curr_location", mode="before")
    @classmethod
    def normalize_location(cls, v):
        return parse_location(v)


class DeviceResponse(BaseModel):
    id: int
    admin_id: int
    device_id: str
    name: str
    location: Optional[str] = None
    status: DeviceStatusEnum
    battery_level: int
    firmware_version: str
    last_seen: Optional[datetime] = None
    curr_location: Optional[Dict[str, float]] = None

    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_age: Optional[int] = None
    driver_photo: Optional[str] = None
    driver_photo_thumbnail: Optional[str] = None
    license_no: Optional[str] = None
    contact_number: Optional[str] = None

    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None

    captured_images: List[CapturedImage] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("curr_location", mode="before")
    @classmethod
    def normalize_location(cls, v):
        return parse_location(v)

    @field_validator("captured_images", mode="before")
    @classmethod
    def images_default(cls, v):
        return v or []

    @model_validator(mode="after")
    def fill_photo_thumbnail(self):
        self.driver_photo_thumbnail = get_optimized_image_url(self.driver_photo, width=150, height=150)
        return self


class DeviceStats(BaseModel):
    total: int = 0
    active: int = 0
    offline: int = 0


class DeviceStatistics(BaseModel):
    device_id: str
    days: int
    total_readings: int = 0
    average_bac: float = 0.0
    max_bac: float = 0.0
    alert_count: int = 0
    safe_readings: int = 0
    warning_readings: int = 0
    critical_readings: int = 0

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Any
from datetime import datetime


class DeviceStatusSnapshot(BaseModel):
    device_id: str
    alcohol_level: float = 0.0
    engine: str = "UNKNOWN"
    timestamp: Optional[Any] = None
    connected: bool = False
    status: str


class DeviceStatusUpdate(BaseModel):
    alcohol_level: Optional[float] = Field(None, ge=0)
    engine: Optional[str] = Field(None, max_length=20)
    connected: Optional[bool] = None


class TelemetryReading(BaseModel):
    """A reading pushed by the in-vehicle unit"""
    alcohol_level: float = Field(..., ge=0)
    engine: Optional[str] = Field(None, max_length=20)
    connected: bool = True


class EngineLogResponse(BaseModel):
    engine_log_id: int
    device_id: str
    previous_status: Optional[str] = None
    new_status: str
    action: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)

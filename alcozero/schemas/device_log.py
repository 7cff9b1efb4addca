from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Any
from datetime import datetime

from alcozero.core.severity import LogStatus


class DeviceLogCreate(BaseModel):
    device_id: Optional[str] = Field(None, max_length=100)
    alcohol_level: float = Field(..., ge=0)
    engine: str = Field("UNKNOWN", max_length=20)
    timestamp: Optional[Any] = Field(None, description="Epoch millis or ISO datetime; defaults to now")


class DeviceLogBatchCreate(BaseModel):
    logs: List[DeviceLogCreate] = Field(..., min_length=1, max_length=500)


class DeviceLogResponse(BaseModel):
    log_id: int
    device_id: str
    alcohol_level: float
    engine: str
    status: LogStatus
    source: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)

from pydantic import BaseModel, Field, ConfigDict, computed_field
from typing import Optional
from datetime import datetime

from alcozero.core.severity import AlertPriority, classify_severity
from alcozero.models.alert import AlertTypeEnum, AlertStatusEnum


class AlertTriggerRequest(BaseModel):
    device_id: Optional[str] = Field(None, max_length=100)
    alcohol_level: Optional[float] = Field(None, ge=0)
    engine: Optional[str] = Field(None, max_length=20)


class AlertStatusUpdate(BaseModel):
    status: AlertStatusEnum


class AlertResponse(BaseModel):
    alert_id: int
    device_id: str
    alcohol_level: float
    engine: str
    alert_type: AlertTypeEnum
    message: Optional[str] = None
    status: AlertStatusEnum
    priority: Optional[AlertPriority] = None
    triggered_by: Optional[int] = None
    timestamp: datetime
    status_updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def severity(self) -> str:
        return classify_severity(self.alcohol_level).value

    @computed_field
    @property
    def severity_label(self) -> str:
        return classify_severity(self.alcohol_level).label

from enum import Enum
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class TimeRangeEnum(str, Enum):
    ONE_DAY = "1d"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"

    @property
    def days(self) -> int:
        return {"1d": 1, "7d": 7, "30d": 30}[self.value]


class DailyStatisticResponse(BaseModel):
    stat_date: date
    total_logs: int = 0
    total_alerts: int = 0
    average_alcohol_level: float = 0.0
    max_alcohol_level: float = 0.0
    device_count: int = 0
    generated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

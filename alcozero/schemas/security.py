from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum

from alcozero.core.severity import Severity, WARNING_THRESHOLD


class PasswordPolicyEnum(str, Enum):
    BASIC = "basic"
    STRONG = "strong"
    STRICT = "strict"


class SecuritySettings(BaseModel):
    two_factor_enabled: bool = False
    session_timeout: int = Field(30, ge=1, le=1440, description="Minutes")
    password_policy: PasswordPolicyEnum = PasswordPolicyEnum.STRONG
    alert_threshold: float = Field(WARNING_THRESHOLD, ge=0)
    auto_lock: bool = True
    audit_logging: bool = True


class SecuritySettingsUpdate(BaseModel):
    two_factor_enabled: Optional[bool] = None
    session_timeout: Optional[int] = Field(None, ge=1, le=1440)
    password_policy: Optional[PasswordPolicyEnum] = None
    alert_threshold: Optional[float] = Field(None, ge=0)
    auto_lock: Optional[bool] = None
    audit_logging: Optional[bool] = None


class SecurityLogResponse(BaseModel):
    log_id: int
    event: str
    message: str
    severity: Severity
    user_email: Optional[str] = None
    audit_data: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)

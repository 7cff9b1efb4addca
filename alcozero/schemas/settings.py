from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional, List, Dict, Any
from enum import Enum

from alcozero.schemas.security import SecuritySettingsUpdate


class ThemeEnum(str, Enum):
    DARK = "dark"
    LIGHT = "light"


class ProfileResponse(BaseModel):
    name: str
    email: str
    organization: Optional[str] = None
    role: str
    phone: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    organization: Optional[str] = Field(None, max_length=150)
    role: Optional[str] = Field(None, max_length=30)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("name", "email", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True
    alerts: bool = True
    reports: bool = False


class DashboardPreferences(BaseModel):
    auto_refresh: bool = True
    refresh_interval: int = Field(30, ge=5, le=3600, description="Seconds")
    default_view: str = "monitor"


class Preferences(BaseModel):
    theme: ThemeEnum = ThemeEnum.DARK
    language: str = "en"
    timezone: str = "UTC"
    date_format: str = "MM/DD/YYYY"
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    auto_refresh: bool = True
    dashboard: DashboardPreferences = Field(default_factory=DashboardPreferences)


class NotificationPreferencesUpdate(BaseModel):
    email: Optional[bool] = None
    push: Optional[bool] = None
    alerts: Optional[bool] = None
    reports: Optional[bool] = None


class DashboardPreferencesUpdate(BaseModel):
    auto_refresh: Optional[bool] = None
    refresh_interval: Optional[int] = Field(None, ge=5, le=3600)
    default_view: Optional[str] = None


class PreferencesUpdate(BaseModel):
    theme: Optional[ThemeEnum] = None
    language: Optional[str] = None
    timezone: Optional[str] = None
    date_format: Optional[str] = None
    notifications: Optional[NotificationPreferencesUpdate] = None
    auto_refresh: Optional[bool] = None
    dashboard: Optional[DashboardPreferencesUpdate] = None


class ImportSettings(BaseModel):
    security: Optional[SecuritySettingsUpdate] = None
    preferences: Optional[PreferencesUpdate] = None


class ImportPayload(BaseModel):
    """Body of a data import: the shape produced by the export endpoint"""
    profile: Optional[Dict[str, Any]] = None
    devices: Optional[List[Dict[str, Any]]] = None
    settings: Optional[ImportSettings] = None

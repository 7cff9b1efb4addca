from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

MIN_SIGNUP_PASSWORD_LENGTH = 6
MIN_CHANGED_PASSWORD_LENGTH = 8


class SignupRequest(BaseModel):
    """Schema for admin sign-up"""
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str
    organization: Optional[str] = Field(None, max_length=150)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v) < MIN_SIGNUP_PASSWORD_LENGTH:
            raise ValueError("Password should be at least 6 characters")
        return v


class LoginRequest(BaseModel):
    """Schema for admin login"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminResponse(BaseModel):
    admin_id: int
    name: str
    email: str
    phone: Optional[str] = None
    organization: Optional[str] = None
    role: str
    is_active: bool
    device_ids: List[str] = []
    last_login_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Schema for token response"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    admin: AdminResponse
    permissions: List[str] = []


class PasswordChangeRequest(BaseModel):
    """Schema for password change request"""
    current_password: str
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_length(cls, v):
        if len(v) < MIN_CHANGED_PASSWORD_LENGTH:
            raise ValueError("Password must be at least 8 characters long")
        return v

from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


class ContactCreate(BaseModel):
    name: str = Field(..., max_length=150)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    message: str = Field(..., max_length=5000)

    @field_validator("name", "message")
    @classmethod
    def required_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Please fill in all required fields")
        return v.strip()


class ContactResponse(BaseModel):
    contact_id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    status: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)

# booking_api/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

class RegisterRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[str] = Field(None, description="DOCTOR or PATIENT")
    specialization: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=500)

    @field_validator("photo_url")
    @classmethod
    def validate_photo_url(cls, v):
        if v is None or v == "":
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("photo_url must be an http(s) URL")
        return v

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

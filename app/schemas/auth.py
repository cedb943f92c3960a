from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from app.core import validation


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str
    phone: str
    national_id_number: str = Field(..., description="12-digit Aadhar number")
    address: str

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v: str) -> str:
        return validation.normalize_required_text(v, "Full name")

    @field_validator("address")
    @classmethod
    def check_address(cls, v: str) -> str:
        return validation.normalize_required_text(v, "Address")

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        return validation.normalize_phone(v)

    @field_validator("national_id_number")
    @classmethod
    def check_national_id(cls, v: str) -> str:
        return validation.normalize_national_id(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ProfileResponse(BaseModel):
    full_name: str
    phone: Optional[str]
    national_id_number: Optional[str]  # masked for the owner's own views
    address: Optional[str]
    is_eligible: bool


class UserResponse(BaseModel):
    id: str
    email: str
    status: str
    created_at: datetime
    profile: Optional[ProfileResponse] = None

    class Config:
        from_attributes = True


class SessionResponse(UserResponse):
    is_admin: bool


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: Optional[SessionResponse] = None


class RefreshTokenRequest(BaseModel):
    refresh_token: str

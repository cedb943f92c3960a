from pydantic import BaseModel, field_validator
from typing import Optional
from app.core import validation


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    national_id_number: Optional[str] = None
    address: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validation.normalize_required_text(v, "Full name")

    @field_validator("address")
    @classmethod
    def check_address(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validation.normalize_required_text(v, "Address")

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validation.normalize_phone(v)

    @field_validator("national_id_number")
    @classmethod
    def check_national_id(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validation.normalize_national_id(v)


class CitizenProfileResponse(BaseModel):
    """Full profile as seen by admins"""
    id: str
    email: str
    full_name: str
    phone: Optional[str]
    national_id_number: Optional[str]
    address: Optional[str]
    is_eligible: bool

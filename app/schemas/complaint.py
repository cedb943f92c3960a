from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.models.complaint import ComplaintType


class ComplaintCreate(BaseModel):
    complaint_type: ComplaintType
    description: str = Field(..., min_length=1, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)


class ComplaintResponse(BaseModel):
    complaint_id: str
    complaint_type: str
    description: str
    location: Optional[str]
    status: str
    user_name: str
    user_email: str
    user_phone: Optional[str]
    created_at: datetime


class TrackedComplaintResponse(BaseModel):
    """Public tracking view, without the complainant's contact details"""
    complaint_id: str
    complaint_type: str
    description: str
    location: Optional[str]
    status: str
    user_name: str
    created_at: datetime


class ComplaintSubmittedResponse(BaseModel):
    complaint: ComplaintResponse
    message: str


def complaint_response(complaint) -> ComplaintResponse:
    return ComplaintResponse(
        complaint_id=complaint.complaint_id,
        complaint_type=complaint.complaint_type,
        description=complaint.description,
        location=complaint.location,
        status=complaint.status.value,
        user_name=complaint.user_name,
        user_email=complaint.user_email,
        user_phone=complaint.user_phone,
        created_at=complaint.created_at,
    )

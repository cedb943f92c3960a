from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_active_user
from app.core.complaint_tracker import ComplaintTracker, DEFAULT_LIST_LIMIT
from app.schemas.complaint import (
    ComplaintCreate, ComplaintResponse, ComplaintSubmittedResponse, complaint_response
)

router = APIRouter()


@router.post("", response_model=ComplaintSubmittedResponse, status_code=status.HTTP_201_CREATED)
async def submit_complaint(
    complaint_data: ComplaintCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Submit a complaint and get its tracking ID"""
    complaint = await ComplaintTracker(db).submit(
        user_id=current_user.id,
        complaint_type=complaint_data.complaint_type.value,
        description=complaint_data.description,
        location=complaint_data.location,
    )
    return ComplaintSubmittedResponse(
        complaint=complaint_response(complaint),
        message=f"Your complaint ID is: {complaint.complaint_id}. Please save this for tracking."
    )


@router.get("/mine", response_model=List[ComplaintResponse])
async def list_my_complaints(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=50),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's latest complaints"""
    complaints = await ComplaintTracker(db).list_for_user(current_user.id, limit=limit)
    return [complaint_response(c) for c in complaints]

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.core.complaint_tracker import ComplaintTracker
from app.schemas.complaint import TrackedComplaintResponse

router = APIRouter()


MUNICIPAL_SERVICES = [
    {
        "slug": "trade-license",
        "name": "Trade License",
        "description": "New trade licences and annual renewals for shops and businesses"
    },
    {
        "slug": "birth-certificate",
        "name": "Birth Certificate",
        "description": "Registration of births and issue of certificates"
    },
    {
        "slug": "death-certificate",
        "name": "Death Certificate",
        "description": "Registration of deaths and issue of certificates"
    },
    {
        "slug": "property-registration",
        "name": "Property Registration",
        "description": "Mutation and registration of holdings for property tax assessment"
    },
    {
        "slug": "water-connection",
        "name": "Water Connection",
        "description": "New domestic and commercial water supply connections"
    },
    {
        "slug": "building-permit",
        "name": "Building Permit",
        "description": "Approval of building plans and construction permits"
    },
]

CONTACT_INFORMATION = {
    "office": "Municipal Corporation Office",
    "phone": "0621-2212345",
    "email": "info@municipal.example.gov.in",
    "office_hours": "Monday to Saturday, 10:00 AM - 5:00 PM",
}


@router.get("/services")
async def list_municipal_services():
    """Static catalog of municipal services"""
    return {
        "services": MUNICIPAL_SERVICES,
        "contact": CONTACT_INFORMATION,
    }


@router.get("/complaints/{code}", response_model=TrackedComplaintResponse)
async def track_complaint(
    code: str,
    db: AsyncSession = Depends(get_db)
):
    """Look up a complaint by its tracking ID, no sign-in needed"""
    complaint = await ComplaintTracker(db).track_by_code(code)
    if complaint is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No complaint found with this tracking ID"
        )
    return TrackedComplaintResponse(
        complaint_id=complaint.complaint_id,
        complaint_type=complaint.complaint_type,
        description=complaint.description,
        location=complaint.location,
        status=complaint.status.value,
        user_name=complaint.user_name,
        created_at=complaint.created_at,
    )

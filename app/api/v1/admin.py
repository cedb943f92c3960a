from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_admin_user
from app.core.profile_directory import ProfileDirectory, CitizenProfile
from app.core.tax_ledger import TaxLedger
from app.schemas.profile import CitizenProfileResponse
from app.schemas.tax import (
    TaxRecordCreate, TaxRecordUpdate, TaxRecordResponse, AdminTaxRecordResponse,
    tax_record_response, admin_tax_record_response
)

router = APIRouter()


def _profile_response(profile: CitizenProfile) -> CitizenProfileResponse:
    return CitizenProfileResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        phone=profile.phone,
        national_id_number=profile.national_id_number,
        address=profile.address,
        is_eligible=profile.is_eligible,
    )


# Users
@router.get("/users/eligible", response_model=List[CitizenProfileResponse])
async def list_eligible_users(
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """Users whose profiles are complete enough to receive tax records"""
    profiles = await ProfileDirectory(db).list_eligible_users()
    return [_profile_response(p) for p in profiles]


@router.get("/users", response_model=List[CitizenProfileResponse])
async def list_users(
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """Every profile, with its eligibility flag"""
    profiles = await ProfileDirectory(db).list_profiles()
    return [_profile_response(p) for p in profiles]


@router.get("/users/{user_id}", response_model=CitizenProfileResponse)
async def get_user_detail(
    user_id: str,
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await ProfileDirectory(db).resolve_user(user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return _profile_response(profile)


# Tax records
@router.get("/tax-records", response_model=List[AdminTaxRecordResponse])
async def list_tax_records(
    search: Optional[str] = Query(None, max_length=100),
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    """All tax records, optionally filtered by property, tax type, owner name or Aadhar number"""
    ledger = TaxLedger(db)
    entries = await ledger.list_all(search)
    return [
        admin_tax_record_response(e.record, ledger.status_of(e.record), e.owner)
        for e in entries
    ]


@router.post("/tax-records", response_model=TaxRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_tax_record(
    record_data: TaxRecordCreate,
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    ledger = TaxLedger(db)
    record = await ledger.create_record(
        user_id=record_data.user_id,
        property_id=record_data.property_id,
        tax_type=record_data.tax_type.value,
        amount=record_data.amount,
        due_date=record_data.due_date,
        financial_year=record_data.financial_year,
        property_address=record_data.property_address,
    )
    return tax_record_response(record, ledger.status_of(record))


@router.put("/tax-records/{record_id}", response_model=TaxRecordResponse)
async def update_tax_record(
    record_id: str,
    record_data: TaxRecordUpdate,
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    fields = record_data.model_dump(exclude_unset=True)
    for key in ("tax_type", "status"):
        if fields.get(key) is not None:
            fields[key] = fields[key].value

    ledger = TaxLedger(db)
    record = await ledger.update_record(record_id, fields)
    return tax_record_response(record, ledger.status_of(record))


@router.delete("/tax-records/{record_id}")
async def delete_tax_record(
    record_id: str,
    confirm: bool = Query(False, description="Must be true; deletion cannot be undone"),
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deleting a tax record is permanent; repeat the request with confirm=true"
        )
    await TaxLedger(db).delete_record(record_id)
    return {"message": "Tax record deleted"}


@router.post("/tax-records/{record_id}/mark-paid", response_model=TaxRecordResponse)
async def mark_tax_record_paid(
    record_id: str,
    current_admin: User = Depends(get_current_admin_user),
    db: AsyncSession = Depends(get_db)
):
    ledger = TaxLedger(db)
    record = await ledger.mark_paid(record_id)
    return tax_record_response(record, ledger.status_of(record))

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_active_user
from app.core.tax_ledger import TaxLedger
from app.schemas.tax import TaxRecordResponse, DuesSummaryResponse, tax_record_response

router = APIRouter()


@router.get("/records", response_model=List[TaxRecordResponse])
async def list_my_tax_records(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's tax records, most recent first"""
    ledger = TaxLedger(db)
    records = await ledger.list_for_user(current_user.id)
    return [tax_record_response(r, ledger.status_of(r)) for r in records]


@router.get("/summary", response_model=DuesSummaryResponse)
async def get_my_dues_summary(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Totals for the caller's dashboard"""
    summary = await TaxLedger(db).summary_for_user(current_user.id)
    return DuesSummaryResponse(
        total_records=summary.total_records,
        pending_amount=float(summary.pending_amount),
        overdue_amount=float(summary.overdue_amount),
        paid_amount=float(summary.paid_amount),
        next_due_date=summary.next_due_date,
    )


@router.post("/records/{record_id}/pay", response_model=TaxRecordResponse)
async def pay_tax_record(
    record_id: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Pay Now: marks the caller's own record as paid (no payment gateway)"""
    ledger = TaxLedger(db)
    record = await ledger.pay_as_owner(record_id, current_user.id)
    return tax_record_response(record, ledger.status_of(record))

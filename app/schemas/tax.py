from pydantic import BaseModel
from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from app.models.tax_record import TaxType, TaxStatus


class TaxRecordCreate(BaseModel):
    user_id: str
    property_id: str
    tax_type: TaxType
    amount: Decimal
    due_date: date
    financial_year: str
    property_address: Optional[str] = None


class TaxRecordUpdate(BaseModel):
    user_id: Optional[str] = None
    property_id: Optional[str] = None
    tax_type: Optional[TaxType] = None
    amount: Optional[Decimal] = None
    due_date: Optional[date] = None
    financial_year: Optional[str] = None
    property_address: Optional[str] = None
    status: Optional[TaxStatus] = None


class TaxRecordResponse(BaseModel):
    id: str
    user_id: str
    property_id: str
    property_address: Optional[str]
    tax_type: str
    amount: float
    due_date: date
    financial_year: str
    status: str
    paid_date: Optional[datetime]
    created_at: datetime


class AdminTaxRecordResponse(TaxRecordResponse):
    user_full_name: Optional[str]
    user_email: Optional[str]
    user_national_id_number: Optional[str]


class DuesSummaryResponse(BaseModel):
    total_records: int
    pending_amount: float
    overdue_amount: float
    paid_amount: float
    next_due_date: Optional[date]


def tax_record_response(record, status: TaxStatus) -> TaxRecordResponse:
    """Build the response with the status as of today"""
    return TaxRecordResponse(**_record_fields(record, status))


def admin_tax_record_response(record, status: TaxStatus, owner) -> AdminTaxRecordResponse:
    return AdminTaxRecordResponse(
        **_record_fields(record, status),
        user_full_name=owner.full_name if owner else None,
        user_email=owner.email if owner else None,
        user_national_id_number=owner.national_id_number if owner else None,
    )


def _record_fields(record, status: TaxStatus) -> dict:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "property_id": record.property_id,
        "property_address": record.property_address,
        "tax_type": record.tax_type,
        "amount": float(record.amount),
        "due_date": record.due_date,
        "financial_year": record.financial_year,
        "status": status.value,
        "paid_date": record.paid_date,
        "created_at": record.created_at,
    }

"""
Tax ledger: municipal tax obligations and their payment status.

Stored status is either pending or paid. A pending record whose due date
has passed is reported as overdue when read; nothing writes overdue.
Paid records always carry paid_date and other records never do. Paid is
terminal: an edit cannot move a record back to pending.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, List, Dict, Any, Callable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from app.models.tax_record import TaxRecord, TaxStatus, TaxType
from app.core.profile_directory import ProfileDirectory, CitizenProfile
from app.core.exceptions import ValidationError, NotFoundError, AuthorizationError, RetrievalError
from app.core.validation import require_positive_amount, is_non_blank
from app.websocket.manager import manager
from app.websocket.events import create_tax_record_event
import logging

logger = logging.getLogger(__name__)

TAX_TYPES = [t.value for t in TaxType]

MUTABLE_FIELDS = {
    "user_id", "property_id", "property_address", "tax_type",
    "amount", "due_date", "financial_year", "status",
}


def effective_status(record: TaxRecord, today: Optional[date] = None) -> TaxStatus:
    """Status as shown to users: unpaid records past their due date are overdue"""
    if record.status == TaxStatus.PAID:
        return TaxStatus.PAID
    today = today or date.today()
    if record.due_date is not None and record.due_date < today:
        return TaxStatus.OVERDUE
    return TaxStatus.PENDING


@dataclass
class LedgerEntry:
    record: TaxRecord
    owner: Optional[CitizenProfile]


@dataclass
class DuesSummary:
    total_records: int
    pending_amount: Decimal
    overdue_amount: Decimal
    paid_amount: Decimal
    next_due_date: Optional[date]


class TaxLedger:
    """CRUD and payment transitions over tax records"""

    def __init__(self, db: AsyncSession, today: Optional[Callable[[], date]] = None):
        self.db = db
        self.profiles = ProfileDirectory(db)
        self.today = today or date.today

    async def create_record(
        self,
        user_id: str,
        property_id: str,
        tax_type: str,
        amount: Any,
        due_date: date,
        financial_year: str,
        property_address: Optional[str] = None
    ) -> TaxRecord:
        """Create a pending record for an eligible user"""
        await self._require_eligible_user(user_id)
        record = TaxRecord(
            user_id=user_id,
            property_id=self._required_text(property_id, "Property ID"),
            tax_type=self._check_tax_type(tax_type),
            amount=require_positive_amount(amount),
            due_date=due_date,
            financial_year=self._required_text(financial_year, "Financial year"),
            property_address=property_address or None,
            status=TaxStatus.PENDING,
            paid_date=None,
        )
        self.db.add(record)
        await self._commit(record)

        logger.info(f"Tax record {record.id} created for user {user_id} ({record.tax_type}, {record.amount})")
        await self._publish("tax_record_created", record)
        return record

    async def update_record(self, record_id: str, fields: Dict[str, Any]) -> TaxRecord:
        """Overwrite mutable fields; id and created_at are fixed"""
        fixed = set(fields) - MUTABLE_FIELDS
        if fixed:
            raise ValidationError(f"Fields cannot be changed: {', '.join(sorted(fixed))}")

        record = await self._get(record_id)

        if "status" in fields:
            self._apply_status(record, fields["status"])
        if "user_id" in fields and fields["user_id"] != record.user_id:
            await self._require_eligible_user(fields["user_id"])
            record.user_id = fields["user_id"]
        if "property_id" in fields:
            record.property_id = self._required_text(fields["property_id"], "Property ID")
        if "property_address" in fields:
            record.property_address = fields["property_address"] or None
        if "tax_type" in fields:
            record.tax_type = self._check_tax_type(fields["tax_type"])
        if "amount" in fields:
            record.amount = require_positive_amount(fields["amount"])
        if "due_date" in fields:
            if fields["due_date"] is None:
                raise ValidationError("Due date is required")
            record.due_date = fields["due_date"]
        if "financial_year" in fields:
            record.financial_year = self._required_text(fields["financial_year"], "Financial year")

        await self._commit(record)
        logger.info(f"Tax record {record_id} updated fields: {sorted(fields)}")
        return record

    async def delete_record(self, record_id: str) -> None:
        """Permanently remove a record"""
        record = await self._get(record_id)
        try:
            await self.db.delete(record)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete tax record {record_id}: {str(e)}")
            raise RetrievalError("Could not delete tax record") from e
        logger.info(f"Tax record {record_id} deleted")

    async def mark_paid(self, record_id: str) -> TaxRecord:
        """Record payment. Repeating it keeps the original paid_date."""
        record = await self._get(record_id)
        return await self._settle(record)

    async def pay_as_owner(self, record_id: str, caller_user_id: str) -> TaxRecord:
        """Self-service payment, only for the record's owner"""
        record = await self._get(record_id)
        if record.user_id != caller_user_id:
            logger.warning(f"User {caller_user_id} tried to pay tax record {record_id} owned by another user")
            raise AuthorizationError("You can only pay your own tax records")
        return await self._settle(record)

    async def list_for_user(self, user_id: str) -> List[TaxRecord]:
        """The user's records, most recent first"""
        return await self._fetch(
            select(TaxRecord)
            .where(TaxRecord.user_id == user_id)
            .order_by(TaxRecord.created_at.desc(), TaxRecord.id.desc())
        )

    async def list_all(self, search: Optional[str] = None) -> List[LedgerEntry]:
        """
        Every record with its owner's profile, most recent first.

        search is a case-insensitive substring matched against property ID,
        tax type, owner name and owner national ID number.
        """
        records = await self._fetch(
            select(TaxRecord).order_by(TaxRecord.created_at.desc(), TaxRecord.id.desc())
        )
        owners = await self.profiles.resolve_many(r.user_id for r in records)
        entries = [LedgerEntry(record=r, owner=owners.get(r.user_id)) for r in records]

        term = (search or "").strip().lower()
        if not term:
            return entries
        return [e for e in entries if self._matches(e, term)]

    async def summary_for_user(self, user_id: str) -> DuesSummary:
        records = await self.list_for_user(user_id)
        today = self.today()
        pending = overdue = paid = Decimal("0.00")
        upcoming = []
        for record in records:
            state = effective_status(record, today)
            amount = Decimal(record.amount)
            if state == TaxStatus.PAID:
                paid += amount
            elif state == TaxStatus.OVERDUE:
                overdue += amount
            else:
                pending += amount
                upcoming.append(record.due_date)
        return DuesSummary(
            total_records=len(records),
            pending_amount=pending,
            overdue_amount=overdue,
            paid_amount=paid,
            next_due_date=min(upcoming) if upcoming else None,
        )

    def status_of(self, record: TaxRecord) -> TaxStatus:
        return effective_status(record, self.today())

    # Internals

    async def _settle(self, record: TaxRecord) -> TaxRecord:
        if record.status == TaxStatus.PAID and record.paid_date is not None:
            logger.info(f"Tax record {record.id} already paid on {record.paid_date}")
            return record
        self._apply_status(record, TaxStatus.PAID)
        await self._commit(record)
        logger.info(f"Tax record {record.id} marked paid")
        await self._publish("tax_record_paid", record)
        return record

    def _apply_status(self, record: TaxRecord, value: Any):
        try:
            new_status = TaxStatus(value)
        except ValueError:
            raise ValidationError(f"Unknown status: {value}")

        if new_status == TaxStatus.OVERDUE:
            raise ValidationError("Overdue is derived from the due date and cannot be set")
        if record.status == TaxStatus.PAID and new_status != TaxStatus.PAID:
            raise ValidationError("Paid records cannot be reopened")
        if new_status == TaxStatus.PAID:
            if record.status != TaxStatus.PAID or record.paid_date is None:
                record.paid_date = datetime.now(timezone.utc)
            record.status = TaxStatus.PAID
        else:
            record.status = TaxStatus.PENDING
            record.paid_date = None

    async def _require_eligible_user(self, user_id: str):
        profile = await self.profiles.resolve_user(user_id) if user_id else None
        if profile is None:
            raise ValidationError("Selected user does not exist")
        if not profile.is_eligible:
            raise ValidationError(
                "Selected user has an incomplete profile (name, 10-digit phone, 12-digit Aadhar number and address are required)"
            )

    @staticmethod
    def _check_tax_type(tax_type: Any) -> str:
        value = tax_type.value if isinstance(tax_type, TaxType) else tax_type
        if value not in TAX_TYPES:
            raise ValidationError(f"Unknown tax type: {value}")
        return value

    @staticmethod
    def _required_text(value: Optional[str], field_name: str) -> str:
        if not is_non_blank(value):
            raise ValidationError(f"{field_name} is required")
        return value.strip()

    @staticmethod
    def _matches(entry: LedgerEntry, term: str) -> bool:
        haystack = [entry.record.property_id, entry.record.tax_type]
        if entry.owner is not None:
            haystack.append(entry.owner.full_name)
            haystack.append(entry.owner.national_id_number)
        return any(term in value.lower() for value in haystack if value)

    async def _get(self, record_id: str) -> TaxRecord:
        records = await self._fetch(select(TaxRecord).where(TaxRecord.id == record_id))
        if not records:
            raise NotFoundError("Tax record not found")
        return records[0]

    async def _fetch(self, query) -> List[TaxRecord]:
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Tax record query failed: {str(e)}")
            raise RetrievalError("Could not load tax records") from e

    async def _commit(self, record: TaxRecord):
        try:
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save tax record: {str(e)}")
            raise RetrievalError("Could not save tax record") from e

    async def _publish(self, event_type: str, record: TaxRecord):
        event = create_tax_record_event(
            event_type,
            record_id=record.id,
            user_id=record.user_id,
            property_id=record.property_id,
            tax_type=record.tax_type,
            amount=float(record.amount),
            status=self.status_of(record).value,
        )
        await manager.notify_owner_and_admins(event, record.user_id)

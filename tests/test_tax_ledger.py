from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError, NotFoundError, AuthorizationError
from app.core.tax_ledger import TaxLedger, effective_status
from app.models.tax_record import TaxStatus

BEFORE_DUE = lambda: date(2025, 1, 1)  # noqa: E731


async def create_property_tax(ledger, user_id, **overrides):
    values = dict(
        user_id=user_id,
        property_id="P-100",
        tax_type="Property Tax",
        amount=15000,
        due_date=date(2025, 3, 31),
        financial_year="2024-25",
    )
    values.update(overrides)
    return await ledger.create_record(**values)


async def test_created_record_is_pending_for_its_owner(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    ledger = TaxLedger(db_session, today=BEFORE_DUE)

    await create_property_tax(ledger, owner.id)
    records = await ledger.list_for_user(owner.id)

    assert len(records) == 1
    record = records[0]
    assert record.status == TaxStatus.PENDING
    assert record.paid_date is None
    assert record.amount == Decimal("15000.00")
    assert ledger.status_of(record) == TaxStatus.PENDING


async def test_create_rejects_missing_and_incomplete_users(db_session, citizen_factory):
    incomplete = await citizen_factory("incomplete@gmail.com", phone="12345")
    ledger = TaxLedger(db_session)

    with pytest.raises(ValidationError, match="does not exist"):
        await create_property_tax(ledger, "no-such-user")
    with pytest.raises(ValidationError, match="incomplete profile"):
        await create_property_tax(ledger, incomplete.id)


@pytest.mark.parametrize("amount", [0, -10, "abc", "0.001"])
async def test_create_rejects_non_positive_amounts(db_session, citizen_factory, amount):
    owner = await citizen_factory("owner@gmail.com")
    with pytest.raises(ValidationError):
        await create_property_tax(TaxLedger(db_session), owner.id, amount=amount)


async def test_create_rejects_unknown_tax_type(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    with pytest.raises(ValidationError, match="Unknown tax type"):
        await create_property_tax(TaxLedger(db_session), owner.id, tax_type="Dog Tax")


async def test_mark_paid_keeps_first_paid_date(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    ledger = TaxLedger(db_session)
    record = await create_property_tax(ledger, owner.id)

    first = await ledger.mark_paid(record.id)
    first_paid_date = first.paid_date
    second = await ledger.mark_paid(record.id)

    assert second.status == TaxStatus.PAID
    assert first_paid_date is not None
    assert second.paid_date == first_paid_date


async def test_mark_paid_unknown_record(db_session):
    with pytest.raises(NotFoundError):
        await TaxLedger(db_session).mark_paid("missing")


async def test_pay_as_owner_only_for_own_records(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    other = await citizen_factory("other@gmail.com", national_id_number="999988887777")
    ledger = TaxLedger(db_session)
    record = await create_property_tax(ledger, owner.id)

    with pytest.raises(AuthorizationError):
        await ledger.pay_as_owner(record.id, other.id)

    paid = await ledger.pay_as_owner(record.id, owner.id)
    assert paid.status == TaxStatus.PAID
    assert paid.paid_date is not None


async def test_overdue_is_derived_from_due_date(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    ledger = TaxLedger(db_session, today=lambda: date(2025, 4, 1))
    record = await create_property_tax(ledger, owner.id)

    assert record.status == TaxStatus.PENDING
    assert ledger.status_of(record) == TaxStatus.OVERDUE
    assert effective_status(record, date(2025, 3, 31)) == TaxStatus.PENDING

    paid = await ledger.mark_paid(record.id)
    assert ledger.status_of(paid) == TaxStatus.PAID


async def test_update_keeps_paid_date_consistent_with_status(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    ledger = TaxLedger(db_session)
    record = await create_property_tax(ledger, owner.id)

    updated = await ledger.update_record(record.id, {"status": "paid", "amount": "16000.50"})
    assert updated.status == TaxStatus.PAID
    assert updated.paid_date is not None
    assert updated.amount == Decimal("16000.50")

    with pytest.raises(ValidationError, match="Overdue"):
        await ledger.update_record(record.id, {"status": "overdue"})


async def test_paid_record_cannot_be_reopened(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    ledger = TaxLedger(db_session)
    record = await create_property_tax(ledger, owner.id)
    paid = await ledger.mark_paid(record.id)
    paid_date = paid.paid_date

    with pytest.raises(ValidationError, match="cannot be reopened"):
        await ledger.update_record(record.id, {"status": "pending"})

    current = await ledger.update_record(record.id, {"status": "paid", "amount": "15500"})
    assert current.status == TaxStatus.PAID
    assert current.paid_date == paid_date


async def test_update_rejects_fixed_fields_and_ineligible_owner(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    incomplete = await citizen_factory("incomplete@gmail.com", address="  ")
    ledger = TaxLedger(db_session)
    record = await create_property_tax(ledger, owner.id)

    with pytest.raises(ValidationError, match="cannot be changed"):
        await ledger.update_record(record.id, {"created_at": "2020-01-01"})
    with pytest.raises(ValidationError):
        await ledger.update_record(record.id, {"user_id": incomplete.id})


async def test_update_unknown_record(db_session):
    with pytest.raises(NotFoundError):
        await TaxLedger(db_session).update_record("missing", {"property_id": "P-1"})


async def test_deleted_record_is_gone(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    ledger = TaxLedger(db_session)
    kept = await create_property_tax(ledger, owner.id, property_id="P-1")
    removed = await create_property_tax(ledger, owner.id, property_id="P-2")

    await ledger.delete_record(removed.id)

    ids = [entry.record.id for entry in await ledger.list_all()]
    assert ids == [kept.id]
    with pytest.raises(NotFoundError):
        await ledger.delete_record(removed.id)


async def test_list_all_is_newest_first_and_searchable(db_session, citizen_factory):
    ravi = await citizen_factory("ravi@gmail.com")
    sita = await citizen_factory("sita@gmail.com", full_name="Sita Devi", national_id_number="555566667777")
    ledger = TaxLedger(db_session)
    first = await create_property_tax(ledger, ravi.id, property_id="P-100")
    second = await create_property_tax(ledger, sita.id, property_id="SHOP-7", tax_type="Trade License")

    assert [e.record.id for e in await ledger.list_all()] == [second.id, first.id]
    assert [e.record.id for e in await ledger.list_all("sita")] == [second.id]
    assert [e.record.id for e in await ledger.list_all("trade")] == [second.id]
    assert [e.record.id for e in await ledger.list_all("p-100")] == [first.id]
    assert [e.record.id for e in await ledger.list_all("234567890123")] == [first.id]
    assert await ledger.list_all("no match") == []

    entry = (await ledger.list_all("sita"))[0]
    assert entry.owner.full_name == "Sita Devi"
    assert entry.owner.national_id_number == "555566667777"


async def test_summary_splits_pending_overdue_and_paid(db_session, citizen_factory):
    owner = await citizen_factory("owner@gmail.com")
    ledger = TaxLedger(db_session, today=lambda: date(2025, 2, 1))
    await create_property_tax(ledger, owner.id, amount=1000, due_date=date(2025, 3, 31))
    await create_property_tax(ledger, owner.id, amount=200, due_date=date(2025, 1, 15))
    paid = await create_property_tax(ledger, owner.id, amount=50, due_date=date(2025, 1, 10))
    await ledger.mark_paid(paid.id)

    summary = await ledger.summary_for_user(owner.id)

    assert summary.total_records == 3
    assert summary.pending_amount == Decimal("1000")
    assert summary.overdue_amount == Decimal("200")
    assert summary.paid_amount == Decimal("50")
    assert summary.next_due_date == date(2025, 3, 31)

"""
Script to seed dummy data for testing
Run with: python -m app.scripts.seed_dummy_data
"""
import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy import select

from app.database import AsyncSessionLocal, init_db
from app.models.user import User, UserStatus, UserRoleAssignment, RoleName
from app.models.profile import Profile
from app.models.tax_record import TaxRecord, TaxStatus, TaxType
from app.core.security import get_password_hash, encrypt_national_id


async def get_or_create_account(db, email: str, password: str, full_name: str, phone: str,
                                national_id: str, address: str) -> User:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"{email} already exists, skipping...")
        return user

    print(f"Creating {email}...")
    user = User(email=email, password_hash=get_password_hash(password), status=UserStatus.ACTIVE)
    db.add(user)
    await db.flush()
    db.add(Profile(
        id=user.id,
        full_name=full_name,
        phone=phone,
        national_id_encrypted=encrypt_national_id(national_id),
        address=address,
    ))
    await db.flush()
    return user


async def seed_data():
    """Seed dummy data"""
    print("Seeding dummy data...")

    async with AsyncSessionLocal() as db:
        admin_user = await get_or_create_account(
            db, "admin@example.com", "admin123", "Municipal Admin",
            "9876543210", "111122223333", "Municipal Corporation Office, Ward 1"
        )
        role_result = await db.execute(
            select(UserRoleAssignment).where(
                UserRoleAssignment.user_id == admin_user.id,
                UserRoleAssignment.role == RoleName.ADMIN.value
            )
        )
        if not role_result.scalar_one_or_none():
            print("Granting admin role...")
            db.add(UserRoleAssignment(user_id=admin_user.id, role=RoleName.ADMIN.value))

        citizen = await get_or_create_account(
            db, "citizen@example.com", "citizen123", "Ravi Kumar",
            "9123456780", "234567890123", "House 42, Ward 12, Juran Chhapra"
        )

        records_result = await db.execute(select(TaxRecord).where(TaxRecord.user_id == citizen.id))
        if records_result.scalars().first():
            print("Tax records already exist, skipping...")
        else:
            print("Creating tax records...")
            today = date.today()
            db.add_all([
                TaxRecord(
                    user_id=citizen.id,
                    property_id="P-100",
                    property_address="House 42, Ward 12",
                    tax_type=TaxType.PROPERTY_TAX.value,
                    amount=Decimal("15000.00"),
                    due_date=today + timedelta(days=30),
                    financial_year="2024-25",
                    status=TaxStatus.PENDING,
                ),
                TaxRecord(
                    user_id=citizen.id,
                    property_id="P-100",
                    tax_type=TaxType.WATER_TAX.value,
                    amount=Decimal("1200.00"),
                    due_date=today - timedelta(days=15),
                    financial_year="2024-25",
                    status=TaxStatus.PENDING,
                ),
                TaxRecord(
                    user_id=citizen.id,
                    property_id="SHOP-7",
                    tax_type=TaxType.TRADE_LICENSE.value,
                    amount=Decimal("2500.00"),
                    due_date=today - timedelta(days=60),
                    financial_year="2023-24",
                    status=TaxStatus.PAID,
                    paid_date=datetime.now(timezone.utc) - timedelta(days=75),
                ),
            ])

        await db.commit()

    print("Done. Admin: admin@example.com / admin123, citizen: citizen@example.com / citizen123")


async def main():
    await init_db()
    await seed_data()


if __name__ == "__main__":
    asyncio.run(main())

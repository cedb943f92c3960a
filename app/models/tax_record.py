from sqlalchemy import Column, String, DateTime, Date, Enum, ForeignKey, Numeric, Text, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
from app.database import Base
import uuid


class TaxStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class TaxType(str, enum.Enum):
    PROPERTY_TAX = "Property Tax"
    TRADE_LICENSE = "Trade License"
    ADVERTISEMENT_TAX = "Advertisement Tax"
    WATER_TAX = "Water Tax"
    SEWERAGE_TAX = "Sewerage Tax"
    MOBILE_TOWER_FEE = "Mobile Tower Fee"


class TaxRecord(Base):
    __tablename__ = "tax_records"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_tax_records_amount_positive"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    property_id = Column(String, nullable=False, index=True)
    property_address = Column(Text, nullable=True)
    tax_type = Column(String, nullable=False)  # TaxType value
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    financial_year = Column(String, nullable=False)

    # Stored status is pending or paid; overdue is derived from due_date when read
    status = Column(Enum(TaxStatus), nullable=False, default=TaxStatus.PENDING)
    paid_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    # Relationships
    user = relationship("User")

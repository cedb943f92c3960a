from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
from app.database import Base
import uuid


class ComplaintStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ComplaintType(str, enum.Enum):
    STREET_LIGHT = "Street Light Issue"
    WATER_SUPPLY = "Water Supply Problem"
    GARBAGE_COLLECTION = "Garbage Collection"
    ROAD_CONDITION = "Road Condition"
    DRAINAGE = "Drainage Issue"
    TAX_RELATED = "Tax Related"
    OTHER = "Other"


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    complaint_id = Column(String, unique=True, nullable=False, index=True)  # public tracking code
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshot of the complainant's details at submission time
    user_name = Column(String, nullable=False)
    user_email = Column(String, nullable=False)
    user_phone = Column(String, nullable=True)

    complaint_type = Column(String, nullable=False)  # ComplaintType value
    description = Column(Text, nullable=False)
    location = Column(String, nullable=True)
    status = Column(Enum(ComplaintStatus), nullable=False, default=ComplaintStatus.SUBMITTED)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    # Relationships
    user = relationship("User")

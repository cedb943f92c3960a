"""
Complaint intake and lookup.

Complainant name, email and phone are copied onto the complaint when it
is submitted. They record what the citizen stated at that time and are
not refreshed when the profile changes later.
"""
import secrets
from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from app.config import get_settings
from app.models.complaint import Complaint, ComplaintStatus, ComplaintType
from app.models.user import User
from app.core.profile_directory import ProfileDirectory
from app.core.notifier import NotificationDispatcher, dispatcher as default_dispatcher
from app.core.exceptions import ValidationError, NotFoundError, RetrievalError
from app.core.validation import is_non_blank
from app.websocket.manager import manager
from app.websocket.events import create_complaint_submitted_event
import logging

settings = get_settings()
logger = logging.getLogger(__name__)

COMPLAINT_TYPES = [t.value for t in ComplaintType]
DEFAULT_LIST_LIMIT = 5
CODE_ATTEMPTS = 5


def generate_tracking_code(now: Optional[datetime] = None) -> str:
    """MZF + submission date + 6 random hex characters, e.g. MZF20250114A3F09C"""
    now = now or datetime.now(timezone.utc)
    return f"{settings.COMPLAINT_CODE_PREFIX}{now:%Y%m%d}{secrets.token_hex(3).upper()}"


class ComplaintTracker:
    """Submit complaints and look them up by tracking code or owner"""

    def __init__(self, db: AsyncSession, notifier: Optional[NotificationDispatcher] = None):
        self.db = db
        self.profiles = ProfileDirectory(db)
        self.notifier = notifier or default_dispatcher

    async def submit(
        self,
        user_id: str,
        complaint_type: str,
        description: str,
        location: Optional[str] = None
    ) -> Complaint:
        if complaint_type not in COMPLAINT_TYPES:
            raise ValidationError(f"Unknown complaint type: {complaint_type}")
        if not is_non_blank(description):
            raise ValidationError("Description is required")

        profile = await self.profiles.resolve_user(user_id)
        if profile is not None:
            user_name, user_email, user_phone = profile.full_name or "Unknown User", profile.email, profile.phone
        else:
            account = await self._get_account(user_id)
            user_name, user_email, user_phone = "Unknown User", account.email, None

        complaint = Complaint(
            complaint_id=await self._unique_code(),
            user_id=user_id,
            user_name=user_name,
            user_email=user_email,
            user_phone=user_phone,
            complaint_type=complaint_type,
            description=description.strip(),
            location=(location or "").strip() or None,
            status=ComplaintStatus.SUBMITTED,
        )
        self.db.add(complaint)
        try:
            await self.db.commit()
            await self.db.refresh(complaint)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save complaint for user {user_id}: {str(e)}")
            raise RetrievalError("Could not submit complaint") from e

        logger.info(f"Complaint {complaint.complaint_id} submitted by user {user_id}")

        self.notifier.dispatch(
            complaint={
                "complaint_id": complaint.complaint_id,
                "complaint_type": complaint.complaint_type,
                "description": complaint.description,
                "location": complaint.location,
                "status": complaint.status.value,
                "created_at": complaint.created_at.isoformat() if complaint.created_at else None,
            },
            user_details={
                "name": user_name,
                "email": user_email,
                "phone": user_phone or "Not provided",
            },
        )
        await manager.broadcast_to_admin(create_complaint_submitted_event(
            complaint_id=complaint.complaint_id,
            complaint_type=complaint.complaint_type,
            location=complaint.location,
            user_name=user_name,
        ))
        return complaint

    async def track_by_code(self, code: str) -> Optional[Complaint]:
        """Exact tracking-code lookup; None when no complaint has that code"""
        code = (code or "").strip()
        if not code:
            return None
        try:
            result = await self.db.execute(select(Complaint).where(Complaint.complaint_id == code))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Complaint lookup failed for {code}: {str(e)}")
            raise RetrievalError("Could not look up complaint") from e

    async def list_for_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[Complaint]:
        """The user's latest complaints, most recent first"""
        limit = max(1, min(limit, settings.COMPLAINT_LIST_MAX_LIMIT))
        try:
            result = await self.db.execute(
                select(Complaint)
                .where(Complaint.user_id == user_id)
                .order_by(Complaint.created_at.desc(), Complaint.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Complaint listing failed for user {user_id}: {str(e)}")
            raise RetrievalError("Could not load complaints") from e

    async def _get_account(self, user_id: str) -> User:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
            account = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Account lookup failed for {user_id}: {str(e)}")
            raise RetrievalError("Could not load account") from e
        if account is None:
            raise NotFoundError("User not found")
        return account

    async def _unique_code(self) -> str:
        for _ in range(CODE_ATTEMPTS):
            code = generate_tracking_code()
            if await self.track_by_code(code) is None:
                return code
            logger.warning(f"Tracking code collision on {code}, regenerating")
        raise RetrievalError("Could not allocate a tracking code")

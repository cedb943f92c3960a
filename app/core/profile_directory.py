"""
Profile directory: resolves account ids to citizen identity attributes
and lists the accounts eligible to receive tax records.

The profiles table is the single source of truth. Sign-up writes the
profile in the same transaction as the account.
"""
from dataclasses import dataclass
from typing import Optional, List, Dict, Iterable, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from app.models.profile import Profile
from app.models.user import User
from app.core.security import encrypt_national_id, decrypt_national_id
from app.core.exceptions import NotFoundError, RetrievalError
from app.core import validation
import logging

logger = logging.getLogger(__name__)


@dataclass
class CitizenProfile:
    id: str
    email: str
    full_name: str
    phone: Optional[str]
    national_id_number: Optional[str]
    address: Optional[str]

    @property
    def is_eligible(self) -> bool:
        return validation.is_eligible(self.full_name, self.phone, self.national_id_number, self.address)


class ProfileDirectory:
    """Read and write access to citizen profiles"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_eligible_users(self) -> List[CitizenProfile]:
        """All profiles complete enough to be referenced by a tax record"""
        profiles = await self._load()
        eligible = [p for p in profiles if p.is_eligible]
        logger.debug(f"{len(eligible)} of {len(profiles)} profiles are eligible")
        return eligible

    async def list_profiles(self) -> List[CitizenProfile]:
        return await self._load()

    async def resolve_user(self, user_id: str) -> Optional[CitizenProfile]:
        """Profile for user_id, or None when there is none"""
        profiles = await self._load(select_ids=[user_id])
        return profiles[0] if profiles else None

    async def resolve_many(self, user_ids: Iterable[str]) -> Dict[str, CitizenProfile]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        return {p.id: p for p in await self._load(select_ids=ids)}

    def create_profile(
        self,
        user: User,
        full_name: str,
        phone: Optional[str],
        national_id_number: Optional[str],
        address: Optional[str]
    ) -> Profile:
        """Stage the profile for a new account; the caller commits"""
        profile = Profile(
            id=user.id,
            full_name=full_name,
            phone=phone,
            national_id_encrypted=encrypt_national_id(national_id_number) if national_id_number else None,
            address=address,
        )
        self.db.add(profile)
        return profile

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> CitizenProfile:
        """Overwrite the given profile fields. Values must already be normalized."""
        try:
            result = await self.db.execute(select(Profile).where(Profile.id == user_id))
            profile = result.scalar_one_or_none()
            if profile is None:
                raise NotFoundError("Profile not found")

            for field in ("full_name", "phone", "address"):
                if field in fields:
                    setattr(profile, field, fields[field])
            if "national_id_number" in fields:
                profile.national_id_encrypted = encrypt_national_id(fields["national_id_number"])

            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update profile {user_id}: {str(e)}")
            raise RetrievalError("Could not update profile") from e

        logger.info(f"Profile {user_id} updated fields: {sorted(fields)}")
        return await self.resolve_user(user_id)

    async def _load(self, select_ids: Optional[List[str]] = None) -> List[CitizenProfile]:
        query = select(Profile, User.email).join(User, User.id == Profile.id)
        if select_ids is not None:
            query = query.where(Profile.id.in_(select_ids))
        query = query.order_by(Profile.full_name)

        try:
            result = await self.db.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load profiles: {str(e)}")
            raise RetrievalError("Could not load user profiles") from e

        return [
            CitizenProfile(
                id=profile.id,
                email=email,
                full_name=profile.full_name or "",
                phone=profile.phone,
                national_id_number=decrypt_national_id(profile.national_id_encrypted),
                address=profile.address,
            )
            for profile, email in rows
        ]

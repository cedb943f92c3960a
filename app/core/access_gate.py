from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from app.models.user import UserRoleAssignment, RoleName
import logging

logger = logging.getLogger(__name__)


class AccessGate:
    """Classifies an account as admin or citizen from its role assignments"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_admin(self, user_id: str) -> bool:
        """
        True only when a role row grants admin.
        A missing row and a failed lookup both answer False; they are logged differently.
        """
        try:
            result = await self.db.execute(
                select(UserRoleAssignment.id).where(
                    UserRoleAssignment.user_id == user_id,
                    UserRoleAssignment.role == RoleName.ADMIN.value
                ).limit(1)
            )
            role_id = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Admin role lookup failed for user {user_id}: {str(e)}")
            await self.db.rollback()
            return False

        if role_id is None:
            logger.debug(f"No admin role for user {user_id}")
            return False
        return True

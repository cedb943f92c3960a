from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.user import User
from app.schemas.auth import SessionResponse
from app.schemas.profile import ProfileUpdate
from app.middleware.auth import get_current_active_user
from app.core.profile_directory import ProfileDirectory
from app.api.v1.auth import build_session

router = APIRouter()


@router.put("", response_model=SessionResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Update the caller's own profile"""
    fields = profile_data.model_dump(exclude_none=True)
    if fields:
        await ProfileDirectory(db).update_profile(current_user.id, fields)
    return await build_session(current_user, db)

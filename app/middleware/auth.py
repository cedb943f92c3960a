from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
from app.database import get_db
from app.models.user import User, UserStatus
from app.core.security import decode_token
from app.core.access_gate import AccessGate
from app.core.exceptions import AuthorizationError

bearer_scheme = HTTPBearer(auto_error=False)


async def get_user_from_token(token: Optional[str], db: AsyncSession) -> Optional[User]:
    """Resolve an access token to its account, None if the token is invalid"""
    if not token:
        return None
    payload = decode_token(token)
    if not payload or payload.get("type") != "access" or not payload.get("sub"):
        return None
    result = await db.execute(select(User).where(User.id == payload["sub"]))
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Authenticated account from the Bearer access token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user = await get_user_from_token(credentials.credentials if credentials else None, db)
    if user is None:
        raise credentials_exception
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )
    return current_user


async def get_current_admin_user(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Active account holding the admin role"""
    if not await AccessGate(db).is_admin(current_user.id):
        raise AuthorizationError("Administrator access required")
    return current_user

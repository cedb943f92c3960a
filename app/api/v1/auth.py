from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime, timezone
from app.database import get_db
from app.models.user import User, UserStatus, ApiToken, TokenType
from app.schemas.auth import (
    UserCreate, UserLogin, TokenResponse, SessionResponse, ProfileResponse, RefreshTokenRequest
)
from app.middleware.auth import get_current_user
from app.core.profile_directory import ProfileDirectory
from app.core.access_gate import AccessGate
from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_token,
    mask_national_id
)
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


async def build_session(user: User, db: AsyncSession) -> SessionResponse:
    """Account, own profile (national ID masked) and admin flag"""
    profile = await ProfileDirectory(db).resolve_user(user.id)
    profile_response = None
    if profile is not None:
        profile_response = ProfileResponse(
            full_name=profile.full_name,
            phone=profile.phone,
            national_id_number=mask_national_id(profile.national_id_number),
            address=profile.address,
            is_eligible=profile.is_eligible,
        )
    return SessionResponse(
        id=user.id,
        email=user.email,
        status=user.status.value,
        created_at=user.created_at,
        profile=profile_response,
        is_admin=await AccessGate(db).is_admin(user.id),
    )


async def issue_tokens(user: User, db: AsyncSession) -> tuple[str, str]:
    """New access/refresh pair; the refresh token is stored hashed so it can be revoked"""
    access_token = create_access_token(data={"sub": user.id})
    refresh_token, expires_at = create_refresh_token(data={"sub": user.id})
    db.add(ApiToken(
        user_id=user.id,
        token_hash=hash_token(refresh_token),
        token_type=TokenType.REFRESH,
        expires_at=expires_at,
    ))
    await db.commit()
    return access_token, refresh_token


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a citizen account together with its profile"""
    result = await db.execute(
        select(User).where(User.email == user_data.email)
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    new_user = User(
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        status=UserStatus.ACTIVE,
    )
    db.add(new_user)
    await db.flush()

    ProfileDirectory(db).create_profile(
        new_user,
        full_name=user_data.full_name,
        phone=user_data.phone,
        national_id_number=user_data.national_id_number,
        address=user_data.address,
    )
    await db.commit()
    await db.refresh(new_user)

    logger.info(f"Registered account {new_user.id}")
    return await build_session(new_user, db)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login and get access/refresh tokens"""
    result = await db.execute(
        select(User).where(User.email == credentials.email)
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    access_token, refresh_token = await issue_tokens(user, db)
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=await build_session(user, db)
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    refresh_token_data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new pair; the old one is revoked"""
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid refresh token"
    )
    payload = decode_token(refresh_token_data.refresh_token)
    if not payload or payload.get("type") != "refresh" or not payload.get("sub"):
        raise invalid

    result = await db.execute(
        select(ApiToken).where(
            ApiToken.token_hash == hash_token(refresh_token_data.refresh_token),
            ApiToken.token_type == TokenType.REFRESH
        )
    )
    stored = result.scalar_one_or_none()
    if stored is None or stored.revoked_at is not None or stored.user_id != payload["sub"]:
        raise invalid

    result = await db.execute(select(User).where(User.id == stored.user_id))
    user = result.scalar_one_or_none()
    if not user or user.status != UserStatus.ACTIVE:
        raise invalid

    stored.revoked_at = datetime.now(timezone.utc)
    access_token, new_refresh_token = await issue_tokens(user, db)
    return TokenResponse(
        access_token=access_token,
        refresh_token=new_refresh_token
    )


@router.post("/logout")
async def logout(
    refresh_token_data: RefreshTokenRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Revoke the session's refresh token"""
    result = await db.execute(
        select(ApiToken).where(
            ApiToken.token_hash == hash_token(refresh_token_data.refresh_token),
            ApiToken.user_id == current_user.id
        )
    )
    stored = result.scalar_one_or_none()
    if stored is not None and stored.revoked_at is None:
        stored.revoked_at = datetime.now(timezone.utc)
        await db.commit()
    return {"message": "Signed out"}


@router.get("/me", response_model=SessionResponse)
async def get_session(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Current account, profile and role"""
    return await build_session(current_user, db)

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
import bcrypt
from app.config import get_settings
import secrets
import hashlib
from cryptography.fernet import Fernet, InvalidToken
import base64
import logging

settings = get_settings()
logger = logging.getLogger(__name__)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash a password"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": "access"})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def create_refresh_token(data: dict) -> tuple[str, datetime]:
    """Create a JWT refresh token, returns (token, expires_at)"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    # jti keeps two tokens issued in the same second distinct
    to_encode.update({"exp": expire, "type": "refresh", "jti": secrets.token_urlsafe(12)})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt, expire


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def hash_token(token: str) -> str:
    """Hash a token for storage"""
    return hashlib.sha256(token.encode()).hexdigest()


def _national_id_fernet() -> Fernet:
    if settings.NATIONAL_ID_ENCRYPTION_KEY:
        return Fernet(settings.NATIONAL_ID_ENCRYPTION_KEY.encode())
    # Use JWT secret to create encryption key
    key_material = settings.JWT_SECRET_KEY.encode()[:32].ljust(32, b'0')
    return Fernet(base64.urlsafe_b64encode(key_material))


def encrypt_national_id(national_id: str) -> str:
    """Encrypt a national ID number for storage"""
    return _national_id_fernet().encrypt(national_id.encode()).decode()


def decrypt_national_id(encrypted: Optional[str]) -> Optional[str]:
    """Decrypt a national ID number from storage, None if absent or unreadable"""
    if not encrypted:
        return None
    try:
        return _national_id_fernet().decrypt(encrypted.encode()).decode()
    except InvalidToken:
        logger.error("Stored national ID could not be decrypted with the configured key")
        return None


def mask_national_id(national_id: Optional[str]) -> Optional[str]:
    """Show only the last four digits"""
    if not national_id:
        return None
    return "X" * max(len(national_id) - 4, 0) + national_id[-4:]

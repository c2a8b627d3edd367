# app/core/security.py
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings
from app.schemas.user import TokenData

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# Password hashing
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _claims(user_id: int, role: str) -> dict:
    # "sub" must be a string for JWT validation
    return {"sub": str(user_id), "role": role}


# Create Access Token
def create_access_token(user_id: int, role: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    data = _claims(user_id, role)
    data.update({"exp": expire, "type": "access"})
    return jwt.encode(data, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Create Refresh Token
def create_refresh_token(user_id: int, role: str, expires_days: int = 7) -> str:
    expire = datetime.utcnow() + timedelta(days=expires_days)
    data = _claims(user_id, role)
    data.update({"exp": expire, "type": "refresh"})
    return jwt.encode(data, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode(token: str, expected_type: str) -> TokenData:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return TokenData()

    if payload.get("type") != expected_type:
        return TokenData()
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return TokenData()
    return TokenData(user_id=user_id, role=payload.get("role"))


# Decode Access Token
def decode_access_token(token: str) -> TokenData:
    return _decode(token, "access")


# Decode Refresh Token
def decode_refresh_token(token: str) -> TokenData:
    return _decode(token, "refresh")

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.enums.user_roles import UserRole
from app.schemas.user import UserCreate, UserResponse
from app.core.security import (
    verify_password,
    create_access_token,
    decode_refresh_token,
    create_refresh_token
)
from app.services.user_service import create_user, get_user, get_user_by_username

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=UserResponse)
def register_user(data: UserCreate, db: Session = Depends(get_db)):
    existing = get_user_by_username(db, data.username)
    if existing:
        raise HTTPException(status_code=400, detail="Username already taken")

    # privileged roles are granted by an admin, never self-assigned
    if data.role != UserRole.customer:
        raise HTTPException(status_code=403, detail="Only customer accounts can self-register")

    return create_user(
        db,
        username=data.username,
        password=data.password,
        email=data.email,
        role=data.role.value,
    )


@router.post("/login")
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = get_user_by_username(db, form_data.username)

    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {
        "access_token": create_access_token(user.id, user.role),
        "refresh_token": create_refresh_token(user.id, user.role),
        "token_type": "bearer"
    }

@router.post("/refresh")
def refresh_token(refresh_token: str, db: Session = Depends(get_db)):
    payload = decode_refresh_token(refresh_token)

    if not payload.user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    user = get_user(db, payload.user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    return {
        "access_token": create_access_token(user.id, user.role),
        "token_type": "bearer"
    }

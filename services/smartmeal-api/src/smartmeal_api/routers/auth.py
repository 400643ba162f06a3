"""Authentication router - register, login, token refresh, logout"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartmeal_api.auth import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    get_current_user,
    hash_password,
    resolve_token_user,
    revoke_sessions,
)
from smartmeal_api.config import get_settings
from smartmeal_api.database import User, get_db
from smartmeal_api.models import Token, TokenRefresh, UserLogin, UserRegister, UserResponse

logger = logging.getLogger("smartmeal")

router = APIRouter()


def issue_tokens(user: User) -> Token:
    settings = get_settings()
    return Token(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(user),
        token_type="bearer",
        expires_in=settings.jwt_expire_hours * 3600,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    """Register a new user"""

    email = data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

    user = User(
        email=email,
        name=data.name,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info({"message": "Registered user", "user_id": user.id})
    return user


@router.post("/login", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    """Login with e-mail (as username) and password, returns JWT tokens"""

    user = await authenticate_user(db, form_data.username, form_data.password)
    return issue_tokens(user)


@router.post("/login/json", response_model=Token)
async def login_json(data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Login with JSON body (alternative to form-based login)"""

    user = await authenticate_user(db, data.email, data.password)
    return issue_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(data: TokenRefresh, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new token pair"""

    user = await resolve_token_user(db, data.refresh_token, "refresh")
    return issue_tokens(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Sign out every session of the current user"""

    await revoke_sessions(db, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

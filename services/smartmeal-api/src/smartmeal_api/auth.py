"""Accounts and sessions - password rules, login, token issue and revocation

Every user row carries a ``session_version``. Tokens embed the version they
were issued under, so bumping it (logout, password change) signs the user
out of every session at once.
"""

import logging
import re
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartmeal_api.config import get_settings
from smartmeal_api.database import User, get_db

logger = logging.getLogger("smartmeal")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

MIN_PASSWORD_LENGTH = 8
PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"\d"), "Password must contain at least one number"),
)


def password_problems(password: str) -> list[str]:
    """Every rule the password breaks; empty when it is acceptable"""
    problems = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    problems.extend(message for pattern, message in PASSWORD_RULES if not pattern.search(password))
    return problems


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _encode(user: User, token_type: str, lifetime: timedelta) -> str:
    settings = get_settings()
    claims = {
        "sub": user.id,
        "type": token_type,
        "sv": user.session_version,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user: User) -> str:
    return _encode(user, "access", timedelta(hours=get_settings().jwt_expire_hours))


def create_refresh_token(user: User) -> str:
    return _encode(user, "refresh", timedelta(days=get_settings().jwt_refresh_expire_days))


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token"""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise _unauthorized("Invalid or expired token") from None


async def resolve_token_user(db: AsyncSession, token: str, token_type: str) -> User:
    """
    Load the user a token was issued to.

    Raises:
        HTTPException: 401 if the token is invalid, of the wrong type, or was
            issued before the user's sessions were revoked, or if the account
            is gone or disabled
    """
    payload = decode_token(token)
    if payload.get("type") != token_type:
        raise _unauthorized("Invalid token type")

    user_id = payload.get("sub")
    user = await db.get(User, user_id) if user_id else None
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")

    if payload.get("sv") != user.session_version:
        raise _unauthorized("Session has been revoked")
    return user


async def get_current_user(token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)) -> User:
    return await resolve_token_user(db, token, "access")


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """Look up an account by e-mail (case-insensitive) and check its password"""
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.password_hash):
        logger.info({"message": "Failed login", "email": email.lower()})
        raise _unauthorized("Invalid email or password")

    if not user.is_active:
        raise _unauthorized("User account is disabled")
    return user


async def revoke_sessions(db: AsyncSession, user: User) -> None:
    """Invalidate every token issued to the user so far"""
    user.session_version += 1
    await db.commit()
    logger.info({"message": "Revoked sessions", "user_id": user.id})


async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str) -> None:
    """
    Replace the user's password and sign out all existing sessions.

    Raises:
        HTTPException: 400 if current_password is wrong
    """
    if not verify_password(current_password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    user.password_hash = hash_password(new_password)
    user.session_version += 1
    await db.commit()
    logger.info({"message": "Changed password", "user_id": user.id})

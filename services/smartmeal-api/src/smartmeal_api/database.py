"""Database models and session management"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, AsyncGenerator

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from smartmeal_api.config import get_settings


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by SQLite"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models"""

    pass


class User(Base):
    """User account model"""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    profile_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    session_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # bumped to revoke tokens
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    profile: Mapped["UserProfileRecord"] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class UserProfileRecord(Base):
    """Onboarding profile, one per user"""

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), primary_key=True)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)  # kg
    height: Mapped[float] = mapped_column(Float, nullable=False)  # cm
    activity_level: Mapped[str] = mapped_column(String(32), nullable=False)
    goal: Mapped[str] = mapped_column(String(32), nullable=False)
    diet_type: Mapped[str] = mapped_column(String(32), nullable=False)
    restrictions: Mapped[list[str]] = mapped_column(JSON, default=list)
    allergies: Mapped[list[str]] = mapped_column(JSON, default=list)
    favorite_ingredients: Mapped[list[str]] = mapped_column(JSON, default=list)
    disliked_ingredients: Mapped[list[str]] = mapped_column(JSON, default=list)
    max_daily_calories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationship
    user: Mapped["User"] = relationship(back_populates="profile")


class WeeklyMenuRecord(Base):
    """Generated menu; days are stored as a JSON document"""

    __tablename__ = "weekly_menus"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)
    meals_per_day: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    max_calories_per_day: Mapped[int] = mapped_column(Integer, nullable=False)
    servings_per_meal: Mapped[int] = mapped_column(Integer, nullable=False)
    days: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


# Database engine and session
_engine = None
_async_session_maker = None


async def init_db(database_url: str | None = None):
    """Initialize database and create tables"""
    global _engine, _async_session_maker

    settings = get_settings()
    _engine = create_async_engine(database_url or settings.database_url, echo=settings.debug)
    _async_session_maker = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Dispose of the engine"""
    global _engine, _async_session_maker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_maker = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency"""
    if _async_session_maker is None:
        await init_db()

    async with _async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

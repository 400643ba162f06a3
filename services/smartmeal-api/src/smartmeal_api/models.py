"""Pydantic models for API request/response schemas"""

from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from smartmeal_api.auth import password_problems
from smartmeal_api.domain import (
    ActivityLevel,
    DietType,
    Gender,
    Goal,
    MealType,
    MenuGenerationRequest,
)


def check_password(value: str) -> str:
    problems = password_problems(value)
    if problems:
        raise ValueError(", ".join(problems))
    return value


# Auth schemas
class UserRegister(BaseModel):
    """Registration request"""

    email: EmailStr
    name: str
    password: str
    confirm_password: str

    @field_validator("name")
    @classmethod
    def name_long_enough(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters long")
        return value

    @field_validator("password")
    @classmethod
    def password_strong_enough(cls, value: str) -> str:
        return check_password(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "UserRegister":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class PasswordChange(BaseModel):
    """Change password request; the new password follows the registration rules"""

    current_password: str
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_strong_enough(cls, value: str) -> str:
        return check_password(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordChange":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(BaseModel):
    """Login request"""

    email: EmailStr
    password: str


class Token(BaseModel):
    """JWT token response"""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int


class TokenRefresh(BaseModel):
    """Token refresh request"""

    refresh_token: str


# User schemas
class UserResponse(BaseModel):
    """User account response"""

    id: str
    email: str
    name: str
    profile_completed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Onboarding data, submitted in one piece"""

    age: int = Field(..., ge=13, le=120)
    gender: Gender
    weight: float = Field(..., ge=30, le=300)  # kg
    height: float = Field(..., ge=100, le=250)  # cm
    activity_level: ActivityLevel
    goal: Goal
    diet_type: DietType
    restrictions: list[str] = []
    allergies: list[str] = []
    favorite_ingredients: list[str] = []
    disliked_ingredients: list[str] = []
    max_daily_calories: int | None = Field(None, ge=800, le=5000)


class CaloriesResponse(BaseModel):
    """Calorie figures derived from the profile"""

    bmr: int
    recommended_calories: int
    max_daily_calories: int | None = None


# Menu schemas
class MenuCreateRequest(BaseModel):
    """Generate menu request"""

    start_date: date
    days: int = Field(7, ge=1, le=30)
    meals_per_day: list[MealType] = Field(..., min_length=1)
    max_calories_per_day: int = Field(2000, ge=800, le=5000)
    servings: int = Field(1, ge=1, le=10)

    def to_generation_request(self) -> MenuGenerationRequest:
        return MenuGenerationRequest(**self.model_dump())


class RegenerateMealsRequest(BaseModel):
    """Regenerate the listed meals of a menu"""

    meal_ids: list[str] = Field(..., min_length=1)

"""Users router - account, onboarding profile and calorie figures"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from smartmeal_api.auth import change_password, get_current_user
from smartmeal_api.database import User, UserProfileRecord, get_db
from smartmeal_api.dependencies import get_menu_store, get_profile
from smartmeal_api.domain import OnboardingStep, UserProfile
from smartmeal_api.errors import InvalidProfile
from smartmeal_api.models import CaloriesResponse, PasswordChange, ProfileUpdate, UserResponse
from smartmeal_api.services.menu_store import MenuStore
from smartmeal_api.services.profile_calculator import (
    calculate_bmr,
    get_onboarding_steps,
    get_recommended_calories,
)

logger = logging.getLogger("smartmeal")

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_account(current_user: User = Depends(get_current_user)):
    """Get current user's account"""
    return current_user


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def update_password(
    data: PasswordChange, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    """Change the current user's password; existing tokens stop working"""
    await change_password(db, current_user, data.current_password, data.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/me")
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    menu_store: MenuStore = Depends(get_menu_store),
):
    """Delete the current user together with their profile and menus"""

    user_id = current_user.id
    deleted_menus = await menu_store.delete_by_user_id(user_id)
    await db.execute(delete(UserProfileRecord).where(UserProfileRecord.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()

    logger.info({"message": "Deleted account", "user_id": user_id, "menus": deleted_menus})
    return {"status": "deleted"}


@router.get("/onboarding-steps", response_model=list[OnboardingStep])
async def list_onboarding_steps(current_user: User = Depends(get_current_user)):
    """Onboarding steps, all completed once the profile exists"""
    return get_onboarding_steps(completed=current_user.profile_completed)


@router.get("/me/profile", response_model=UserProfile)
async def get_user_profile(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Get current user's onboarding profile"""

    profile = await get_profile(current_user, db)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.put("/me/profile", response_model=UserProfile)
async def save_user_profile(
    data: ProfileUpdate, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    """Create or replace the current user's onboarding profile"""

    record = await db.get(UserProfileRecord, current_user.id)
    created = record is None
    if created:
        record = UserProfileRecord(user_id=current_user.id)
        db.add(record)

    for field, value in data.model_dump(mode="json").items():
        setattr(record, field, value)

    current_user.profile_completed = True

    await db.commit()
    await db.refresh(record)

    logger.info({"message": "Saved profile", "user_id": current_user.id, "created": created})
    return UserProfile.model_validate(record)


@router.get("/me/calories", response_model=CaloriesResponse)
async def get_calories(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """BMR and goal-adjusted calorie recommendation for the current user"""

    profile = await get_profile(current_user, db)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    try:
        bmr = calculate_bmr(profile)
        recommended = get_recommended_calories(profile)
    except InvalidProfile as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return CaloriesResponse(
        bmr=bmr,
        recommended_calories=recommended,
        max_daily_calories=profile.max_daily_calories,
    )

"""FastAPI dependencies wiring stores and services"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smartmeal_api.config import Settings, get_settings
from smartmeal_api.database import User, UserProfileRecord, get_db
from smartmeal_api.domain import UserProfile
from smartmeal_api.services.menu_generator import MenuGeneratorService
from smartmeal_api.services.menu_store import MenuStore, SqlMenuStore
from smartmeal_api.services.recipe_catalog import DietaryRecipeFilter, FilterContext, RecipeCatalog


@lru_cache
def load_catalog(path: str | None = None) -> RecipeCatalog:
    """Load the recipe catalog once per path"""
    return RecipeCatalog.from_yaml(path)


def get_catalog(settings: Settings = Depends(get_settings)) -> RecipeCatalog:
    return load_catalog(settings.recipe_catalog_path)


def get_menu_store(db: AsyncSession = Depends(get_db)) -> MenuStore:
    return SqlMenuStore(db)


def get_menu_service(
    menu_store: MenuStore = Depends(get_menu_store),
    catalog: RecipeCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
) -> MenuGeneratorService:
    recipe_filter = DietaryRecipeFilter() if settings.recipe_filter_enabled else None
    return MenuGeneratorService(menu_store, catalog, recipe_filter=recipe_filter)


async def get_profile(user: User, db: AsyncSession) -> UserProfile | None:
    """Load a user's onboarding profile, if they completed one"""
    record = await db.get(UserProfileRecord, user.id)
    return UserProfile.model_validate(record) if record else None


async def get_filter_context(user: User, db: AsyncSession, settings: Settings) -> FilterContext | None:
    """Preferences for the recipe filter, or None when filtering is off or there is no profile"""
    if not settings.recipe_filter_enabled:
        return None

    profile = await get_profile(user, db)
    if profile is None:
        return None

    return FilterContext(
        diet_type=profile.diet_type,
        restrictions=profile.restrictions,
        allergies=profile.allergies,
        disliked_ingredients=profile.disliked_ingredients,
    )

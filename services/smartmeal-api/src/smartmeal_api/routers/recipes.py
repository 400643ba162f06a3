"""Recipes router - read-only catalog lookups"""

from fastapi import APIRouter, Depends, HTTPException, status

from smartmeal_api.auth import get_current_user
from smartmeal_api.database import User
from smartmeal_api.dependencies import get_catalog
from smartmeal_api.domain import MealType, Recipe
from smartmeal_api.services.recipe_catalog import RecipeCatalog

router = APIRouter()


@router.get("", response_model=list[Recipe])
async def list_recipes(
    meal_type: MealType | None = None,
    current_user: User = Depends(get_current_user),
    catalog: RecipeCatalog = Depends(get_catalog),
):
    """List catalog recipes, optionally only those of one meal type"""
    if meal_type is None:
        return catalog.all()
    return await catalog.get_recipes_by_meal_type(meal_type)


@router.get("/{recipe_id}", response_model=Recipe)
async def get_recipe(
    recipe_id: str,
    current_user: User = Depends(get_current_user),
    catalog: RecipeCatalog = Depends(get_catalog),
):
    """Get a single recipe"""
    recipe = await catalog.get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
    return recipe

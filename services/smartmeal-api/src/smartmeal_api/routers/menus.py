"""Menus router - generate, regenerate and confirm weekly menus"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartmeal_api.auth import get_current_user
from smartmeal_api.config import Settings, get_settings
from smartmeal_api.database import User, get_db
from smartmeal_api.dependencies import get_filter_context, get_menu_service
from smartmeal_api.domain import MenuStats, WeeklyMenu
from smartmeal_api.errors import Forbidden, InvalidRequest
from smartmeal_api.models import MenuCreateRequest, RegenerateMealsRequest
from smartmeal_api.services.menu_generator import MenuGeneratorService

router = APIRouter()


async def get_owned_menu_or_404(service: MenuGeneratorService, menu_id: str, user: User) -> WeeklyMenu:
    """Fetch a menu the user owns; 404 if it is missing, 403 if it is someone else's"""
    try:
        menu = await service.get_owned_menu(menu_id, user.id)
    except Forbidden:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this menu")

    if menu is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu not found")
    return menu


@router.post("", response_model=WeeklyMenu, status_code=status.HTTP_201_CREATED)
async def generate_menu(
    data: MenuCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    service: MenuGeneratorService = Depends(get_menu_service),
):
    """Generate a new pending menu for the current user"""
    filter_context = await get_filter_context(current_user, db, settings)

    try:
        return await service.generate_menu(current_user.id, data.to_generation_request(), filter_context)
    except InvalidRequest as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("", response_model=list[WeeklyMenu])
async def list_menus(
    current_user: User = Depends(get_current_user), service: MenuGeneratorService = Depends(get_menu_service)
):
    """List the current user's menus, newest first"""
    return await service.get_user_menus(current_user.id)


@router.get("/stats", response_model=MenuStats)
async def menu_stats(
    current_user: User = Depends(get_current_user), service: MenuGeneratorService = Depends(get_menu_service)
):
    """Counts of the current user's menus and meals"""
    return await service.get_stats(current_user.id)


@router.get("/{menu_id}", response_model=WeeklyMenu)
async def get_menu(
    menu_id: str,
    current_user: User = Depends(get_current_user),
    service: MenuGeneratorService = Depends(get_menu_service),
):
    """Get one of the current user's menus"""
    return await get_owned_menu_or_404(service, menu_id, current_user)


@router.post("/{menu_id}/regenerate", response_model=WeeklyMenu)
async def regenerate_meals(
    menu_id: str,
    data: RegenerateMealsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    service: MenuGeneratorService = Depends(get_menu_service),
):
    """Replace the selected meals with new recipes of the same meal type"""
    await get_owned_menu_or_404(service, menu_id, current_user)
    filter_context = await get_filter_context(current_user, db, settings)

    menu = await service.regenerate_selected_meals(menu_id, data.meal_ids, filter_context)
    if menu is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu not found")
    return menu


@router.post("/{menu_id}/confirm", response_model=WeeklyMenu)
async def confirm_menu(
    menu_id: str,
    current_user: User = Depends(get_current_user),
    service: MenuGeneratorService = Depends(get_menu_service),
):
    """Confirm a menu, making it active"""
    await get_owned_menu_or_404(service, menu_id, current_user)

    menu = await service.confirm_menu(menu_id)
    if menu is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu not found")
    return menu

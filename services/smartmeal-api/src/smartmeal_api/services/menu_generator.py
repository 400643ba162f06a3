"""Menu generation, meal regeneration and confirmation"""

import logging
from datetime import date, timedelta
from typing import Iterable

from smartmeal_api.domain import (
    DayMenu,
    Meal,
    MealType,
    MenuGenerationRequest,
    MenuStats,
    MenuStatus,
    NewWeeklyMenu,
    WeeklyMenu,
)
from smartmeal_api.errors import Forbidden, InvalidRequest
from smartmeal_api.services.menu_store import MenuStore, generate_id
from smartmeal_api.services.recipe_catalog import (
    FilterContext,
    RecipeCatalog,
    RecipeFilter,
    RecipePicker,
    get_random_recipe_for_meal_type,
)

logger = logging.getLogger("smartmeal")

MIN_DAYS, MAX_DAYS = 1, 30
MIN_SERVINGS, MAX_SERVINGS = 1, 10
MIN_DAILY_CALORIES, MAX_DAILY_CALORIES = 800, 5000


def generate_meal_id() -> str:
    return generate_id("meal_")


def _us_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def menu_name(request: MenuGenerationRequest) -> str:
    end_date = request.start_date + timedelta(days=request.days - 1)
    return f"Menu {_us_date(request.start_date)} - {_us_date(end_date)}"


def validate_request(request: MenuGenerationRequest, check_ranges: bool = True) -> None:
    """
    Reject requests that cannot produce a meaningful menu.

    Raises:
        InvalidRequest: If days < 1 or no meal types are given, or, with
            check_ranges, if any value is outside its allowed range
    """
    if request.days < MIN_DAYS:
        raise InvalidRequest("days must be at least 1")
    if not request.meals_per_day:
        raise InvalidRequest("meals_per_day must contain at least one meal type")
    if not check_ranges:
        return

    if request.days > MAX_DAYS:
        raise InvalidRequest(f"days must be between {MIN_DAYS} and {MAX_DAYS}")
    if not MIN_SERVINGS <= request.servings <= MAX_SERVINGS:
        raise InvalidRequest(f"servings must be between {MIN_SERVINGS} and {MAX_SERVINGS}")
    if not MIN_DAILY_CALORIES <= request.max_calories_per_day <= MAX_DAILY_CALORIES:
        raise InvalidRequest(f"max_calories_per_day must be between {MIN_DAILY_CALORIES} and {MAX_DAILY_CALORIES}")
    if len(set(request.meals_per_day)) != len(request.meals_per_day):
        raise InvalidRequest("meals_per_day must not repeat a meal type")


class MenuGeneratorService:
    """
    Builds menus from the recipe catalog and edits them in the menu store.

    Recipes are drawn uniformly at random per meal type. The calorie ceiling
    and the user's dietary preferences are recorded on the menu but only
    influence selection when a recipe_filter is supplied.
    """

    def __init__(
        self,
        menu_store: MenuStore,
        catalog: RecipeCatalog,
        picker: RecipePicker | None = None,
        recipe_filter: RecipeFilter | None = None,
        validate_ranges: bool = True,
    ):
        self.menu_store = menu_store
        self.catalog = catalog
        self.picker = picker or RecipePicker()
        self.recipe_filter = recipe_filter
        self.validate_ranges = validate_ranges

    async def _random_recipe(self, meal_type: MealType, context: FilterContext | None):
        return await get_random_recipe_for_meal_type(
            self.catalog, meal_type, self.picker, recipe_filter=self.recipe_filter, context=context
        )

    async def generate_menu(
        self, user_id: str, request: MenuGenerationRequest, filter_context: FilterContext | None = None
    ) -> WeeklyMenu:
        """
        Generate and store a new pending menu.

        For every date from start_date, one recipe is picked for each requested
        meal type in the order given. Meal types without any recipe are skipped,
        so such days hold fewer meals than requested.

        Args:
            user_id: Owner of the new menu
            request: Dates, meal types, calorie ceiling and servings
            filter_context: Preferences passed to the recipe filter, if one is configured

        Returns:
            The stored menu with its id and timestamps

        Raises:
            InvalidRequest: If the request is malformed
        """
        validate_request(request, check_ranges=self.validate_ranges)

        if filter_context is not None:
            filter_context = filter_context.model_copy(
                update={
                    "max_calories_per_day": request.max_calories_per_day,
                    "meals_per_day": len(request.meals_per_day),
                    "servings": request.servings,
                }
            )

        days: list[DayMenu] = []
        skipped: set[MealType] = set()
        for offset in range(request.days):
            current_date = request.start_date + timedelta(days=offset)
            day = DayMenu(date=current_date)

            for meal_type in request.meals_per_day:
                recipe = await self._random_recipe(meal_type, filter_context)
                if recipe is None:
                    skipped.add(meal_type)
                    continue
                day.meals.append(
                    Meal(
                        id=generate_meal_id(),
                        recipe=recipe,
                        date=current_date,
                        meal_type=meal_type,
                        servings=request.servings,
                    )
                )

            day.recalculate()
            days.append(day)

        if skipped:
            logger.warning(
                {
                    "message": "No recipes available for meal types, meals skipped",
                    "user_id": user_id,
                    "meal_types": sorted(m.value for m in skipped),
                }
            )

        menu = NewWeeklyMenu(
            user_id=user_id,
            name=menu_name(request),
            start_date=request.start_date,
            end_date=request.start_date + timedelta(days=request.days - 1),
            days=days,
            status=MenuStatus.PENDING,
            total_days=request.days,
            meals_per_day=list(request.meals_per_day),
            max_calories_per_day=request.max_calories_per_day,
            servings_per_meal=request.servings,
        )

        created = await self.menu_store.create(menu)
        logger.info(
            {
                "message": "Generated menu",
                "menu_id": created.id,
                "user_id": user_id,
                "days": request.days,
                "meals": sum(len(day.meals) for day in created.days),
            }
        )
        return created

    async def regenerate_selected_meals(
        self,
        menu_id: str,
        selected_meal_ids: Iterable[str],
        filter_context: FilterContext | None = None,
    ) -> WeeklyMenu | None:
        """
        Replace the selected meals of a menu with new random recipes.

        Meal ids are matched across all days. A replaced meal gets a new id and
        a new recipe of the same meal type, keeping its date and servings. If no
        recipe of that type exists the meal is left as it was. Every day's total
        is recomputed from its meals.

        Returns:
            The updated menu, or None if the menu does not exist
        """
        menu = await self.menu_store.find_by_id(menu_id)
        if menu is None:
            logger.info({"message": "Menu not found for regeneration", "menu_id": menu_id})
            return None

        selected = set(selected_meal_ids)
        if filter_context is not None:
            filter_context = filter_context.model_copy(
                update={
                    "max_calories_per_day": menu.max_calories_per_day,
                    "meals_per_day": len(menu.meals_per_day),
                    "servings": menu.servings_per_meal,
                }
            )

        replaced = 0
        for day in menu.days:
            for i, meal in enumerate(day.meals):
                if meal.id not in selected:
                    continue
                recipe = await self._random_recipe(meal.meal_type, filter_context)
                if recipe is None:
                    continue
                day.meals[i] = meal.model_copy(update={"id": generate_meal_id(), "recipe": recipe})
                replaced += 1
            day.recalculate()

        updated = await self.menu_store.update(menu_id, days=menu.days)
        logger.info(
            {"message": "Regenerated meals", "menu_id": menu_id, "requested": len(selected), "replaced": replaced}
        )
        return updated

    async def confirm_menu(self, menu_id: str) -> WeeklyMenu | None:
        """Mark a menu as active. Confirming an active menu again changes nothing but updated_at."""
        menu = await self.menu_store.update(menu_id, status=MenuStatus.ACTIVE)
        if menu is not None:
            logger.info({"message": "Confirmed menu", "menu_id": menu_id})
        return menu

    async def get_user_menus(self, user_id: str) -> list[WeeklyMenu]:
        return await self.menu_store.find_by_user_id(user_id)

    async def get_menu_by_id(self, menu_id: str) -> WeeklyMenu | None:
        return await self.menu_store.find_by_id(menu_id)

    async def get_owned_menu(self, menu_id: str, caller_id: str) -> WeeklyMenu | None:
        """
        Fetch a menu on behalf of a caller.

        Returns None if the menu does not exist.

        Raises:
            Forbidden: If the menu belongs to another user
        """
        menu = await self.menu_store.find_by_id(menu_id)
        if menu is None:
            return None
        if menu.user_id != caller_id:
            raise Forbidden(menu_id, caller_id)
        return menu

    async def get_stats(self, user_id: str) -> MenuStats:
        menus = await self.menu_store.find_by_user_id(user_id)
        return MenuStats(
            total_menus=len(menus),
            active_menus=sum(1 for m in menus if m.status in (MenuStatus.ACTIVE, MenuStatus.PENDING)),
            completed_menus=sum(1 for m in menus if m.status == MenuStatus.COMPLETED),
            total_meals=sum(len(day.meals) for m in menus for day in m.days),
        )

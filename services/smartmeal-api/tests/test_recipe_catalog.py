"""
Unit tests for smartmeal_api.services.recipe_catalog.
"""

import random

import pytest
import yaml

from smartmeal_api.domain import DietType, MealType
from smartmeal_api.services.recipe_catalog import (
    DietaryRecipeFilter,
    FilterContext,
    NoFilter,
    RecipeCatalog,
    RecipePicker,
    get_random_recipe_for_meal_type,
)


class FixedRandom:
    """Random source returning a fixed value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestRecipeCatalog:
    """Tests for loading and querying the catalog."""

    def test_seed_catalog_has_six_recipes(self, catalog):
        assert len(catalog) == 6
        assert [r.id for r in catalog.all()] == [f"recipe_00{i}" for i in range(1, 7)]

    @pytest.mark.asyncio
    async def test_filters_by_meal_type(self, catalog):
        breakfasts = await catalog.get_recipes_by_meal_type(MealType.BREAKFAST)
        dinners = await catalog.get_recipes_by_meal_type(MealType.DINNER)

        assert [r.name for r in breakfasts] == ["Avocado Toast", "Greek Yogurt Bowl"]
        assert [r.name for r in dinners] == ["Baked Salmon", "Vegetable Stir Fry"]

    @pytest.mark.asyncio
    async def test_no_snacks_in_seed(self, catalog):
        assert await catalog.get_recipes_by_meal_type(MealType.SNACK) == []

    @pytest.mark.asyncio
    async def test_get_recipe(self, catalog):
        recipe = await catalog.get_recipe("recipe_005")
        assert recipe.name == "Baked Salmon"
        assert recipe.calories == 200
        assert recipe.meal_type == MealType.DINNER
        assert await catalog.get_recipe("recipe_999") is None

    def test_recipes_are_immutable(self, catalog):
        recipe = catalog.all()[0]
        with pytest.raises(Exception):
            recipe.calories = 1

    def test_rejects_duplicate_ids(self, catalog):
        recipe = catalog.all()[0]
        with pytest.raises(ValueError, match="Duplicate"):
            RecipeCatalog([recipe, recipe])

    def test_load_from_custom_yaml(self, tmp_path, snack_recipe):
        path = tmp_path / "recipes.yaml"
        with open(path, "w") as f:
            yaml.dump({"recipes": [snack_recipe.model_dump(mode="json")]}, f)

        catalog = RecipeCatalog.from_yaml(path)

        assert len(catalog) == 1
        assert catalog.all()[0] == snack_recipe

    def test_empty_yaml_gives_empty_catalog(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert len(RecipeCatalog.from_yaml(path)) == 0


class TestRecipePicker:
    """Tests for RecipePicker."""

    def test_empty_list_returns_none(self):
        assert RecipePicker().pick([]) is None

    def test_index_is_floor_of_random_times_length(self, catalog):
        recipes = catalog.all()
        assert RecipePicker(FixedRandom(0.0)).pick(recipes).id == "recipe_001"
        assert RecipePicker(FixedRandom(0.5)).pick(recipes).id == "recipe_004"
        assert RecipePicker(FixedRandom(0.999)).pick(recipes).id == "recipe_006"

    def test_same_seed_same_choices(self, catalog):
        recipes = catalog.all()
        a = RecipePicker(random.Random(7))
        b = RecipePicker(random.Random(7))
        assert [a.pick(recipes).id for _ in range(20)] == [b.pick(recipes).id for _ in range(20)]


class TestGetRandomRecipeForMealType:
    """Tests for get_random_recipe_for_meal_type."""

    @pytest.mark.asyncio
    async def test_returns_recipe_of_meal_type(self, catalog):
        picker = RecipePicker(random.Random(1))
        for _ in range(20):
            recipe = await get_random_recipe_for_meal_type(catalog, MealType.LUNCH, picker)
            assert recipe.meal_type == MealType.LUNCH

    @pytest.mark.asyncio
    async def test_returns_none_without_candidates(self, catalog):
        assert await get_random_recipe_for_meal_type(catalog, MealType.SNACK, RecipePicker()) is None

    @pytest.mark.asyncio
    async def test_filter_narrows_candidates(self, catalog):
        context = FilterContext(allergies=["salmon"])
        picker = RecipePicker(FixedRandom(0.0))

        recipe = await get_random_recipe_for_meal_type(
            catalog, MealType.DINNER, picker, recipe_filter=DietaryRecipeFilter(), context=context
        )

        assert recipe.name == "Vegetable Stir Fry"


class TestDietaryRecipeFilter:
    """Tests for the optional dietary filter."""

    @pytest.fixture
    def recipe_filter(self):
        return DietaryRecipeFilter()

    def test_no_context_keeps_everything(self, recipe_filter, catalog):
        assert recipe_filter(catalog.all(), None) == catalog.all()

    def test_no_filter_keeps_everything(self, catalog):
        assert NoFilter()(catalog.all(), FilterContext(allergies=["tofu"])) == catalog.all()

    def test_allergies_match_ingredients_case_insensitively(self, recipe_filter, catalog):
        kept = recipe_filter(catalog.all(), FilterContext(allergies=["Greek Yogurt"]))
        assert "recipe_002" not in [r.id for r in kept]
        assert len(kept) == 5

    def test_disliked_ingredients_are_dropped(self, recipe_filter, catalog):
        kept = recipe_filter(catalog.all(), FilterContext(disliked_ingredients=["cucumber"]))
        assert {r.id for r in kept} == {"recipe_001", "recipe_002", "recipe_005", "recipe_006"}

    def test_vegetarian_requires_tag(self, recipe_filter, catalog):
        kept = recipe_filter(catalog.all(), FilterContext(diet_type=DietType.VEGETARIAN))
        assert {r.id for r in kept} == {"recipe_001", "recipe_003", "recipe_006"}

    def test_vegan_without_vegan_recipes(self, recipe_filter, catalog, snack_recipe):
        kept = recipe_filter([*catalog.all(), snack_recipe], FilterContext(diet_type=DietType.VEGAN))
        assert kept == [snack_recipe]

    def test_restrictions_require_matching_tag(self, recipe_filter, catalog):
        kept = recipe_filter(catalog.all(), FilterContext(restrictions=["gluten_free"]))
        assert [r.id for r in kept] == ["recipe_003"]

    def test_per_meal_calorie_share(self, recipe_filter, catalog):
        # 1100 kcal over 3 meals with 2 servings leaves 366 kcal per meal
        context = FilterContext(max_calories_per_day=1100, meals_per_day=3, servings=2)
        kept = recipe_filter(catalog.all(), context)
        assert {r.id for r in kept} == {"recipe_001", "recipe_006"}

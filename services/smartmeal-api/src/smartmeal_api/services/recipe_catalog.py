"""Recipe catalog - seeded, read-only recipe lookup and random selection"""

import logging
import math
import random
from pathlib import Path
from typing import Protocol, Sequence

import yaml
from pydantic import BaseModel, Field

from smartmeal_api.domain import DietType, MealType, Recipe

logger = logging.getLogger("smartmeal")

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "recipes.yaml"


class RecipeCatalog:
    """In-memory recipe catalog. Read-only once seeded."""

    def __init__(self, recipes: Sequence[Recipe]):
        self._recipes: dict[str, Recipe] = {}
        for recipe in recipes:
            if recipe.id in self._recipes:
                raise ValueError(f"Duplicate recipe id: {recipe.id}")
            self._recipes[recipe.id] = recipe

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "RecipeCatalog":
        """
        Load a catalog from a YAML file with a top-level ``recipes`` list.

        Args:
            path: Path to the YAML file; the packaged seed file is used when omitted

        Returns:
            A seeded catalog
        """
        catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
        with open(catalog_path) as f:
            data = yaml.safe_load(f) or {}

        recipes = [Recipe.model_validate(item) for item in data.get("recipes", [])]
        logger.info({"message": "Loaded recipe catalog", "path": str(catalog_path), "count": len(recipes)})
        return cls(recipes)

    def __len__(self) -> int:
        return len(self._recipes)

    def all(self) -> list[Recipe]:
        return list(self._recipes.values())

    async def get_recipe(self, recipe_id: str) -> Recipe | None:
        return self._recipes.get(recipe_id)

    async def get_recipes_by_meal_type(self, meal_type: MealType) -> list[Recipe]:
        """All recipes tagged with the meal type, in catalog order."""
        return [recipe for recipe in self._recipes.values() if recipe.meal_type == meal_type]


class FilterContext(BaseModel):
    """What a recipe filter may consult when narrowing candidates"""

    diet_type: DietType = DietType.OMNIVORE
    restrictions: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    disliked_ingredients: list[str] = Field(default_factory=list)
    max_calories_per_day: int | None = None
    meals_per_day: int = 1
    servings: int = 1


class RecipeFilter(Protocol):
    def __call__(self, recipes: list[Recipe], context: FilterContext | None) -> list[Recipe]: ...


class NoFilter:
    """Keeps every candidate. Recipe selection ignores the user's preferences."""

    def __call__(self, recipes: list[Recipe], context: FilterContext | None) -> list[Recipe]:
        return list(recipes)


class DietaryRecipeFilter:
    """
    Drops candidates that conflict with a user's diet, allergies, dislikes,
    restrictions or per-meal calorie share.

    - allergies and disliked ingredients match case-insensitively against ingredient lines
    - vegetarian and vegan diets require the matching recipe tag (vegan recipes count as vegetarian)
    - restrictions such as ``gluten_free`` require the tag ``gluten-free``
    - a recipe is dropped if its calories for the requested servings exceed
      max_calories_per_day divided by the number of meals per day
    """

    DIET_TAGS = {
        DietType.VEGETARIAN: {"vegetarian", "vegan"},
        DietType.VEGAN: {"vegan"},
    }

    def __call__(self, recipes: list[Recipe], context: FilterContext | None) -> list[Recipe]:
        if context is None:
            return list(recipes)
        return [recipe for recipe in recipes if self.accepts(recipe, context)]

    def accepts(self, recipe: Recipe, context: FilterContext) -> bool:
        ingredients = " ".join(recipe.ingredients).lower()
        for item in [*context.allergies, *context.disliked_ingredients]:
            if item and item.lower() in ingredients:
                return False

        tags = {tag.lower() for tag in recipe.tags}
        required_diet_tags = self.DIET_TAGS.get(context.diet_type)
        if required_diet_tags and not tags & required_diet_tags:
            return False

        for restriction in context.restrictions:
            if restriction.lower().replace("_", "-") not in tags:
                return False

        if context.max_calories_per_day:
            share = context.max_calories_per_day / max(context.meals_per_day, 1)
            if recipe.calories * context.servings > share:
                return False

        return True


class RecipePicker:
    """Uniform random choice with an injectable random source"""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def pick(self, recipes: Sequence[Recipe]) -> Recipe | None:
        if not recipes:
            return None
        return recipes[math.floor(self.rng.random() * len(recipes))]


async def get_random_recipe_for_meal_type(
    catalog: RecipeCatalog,
    meal_type: MealType,
    picker: RecipePicker,
    recipe_filter: RecipeFilter | None = None,
    context: FilterContext | None = None,
) -> Recipe | None:
    """
    Pick a random recipe of the given meal type.

    Returns None instead of raising when no recipe is available.
    """
    recipes = await catalog.get_recipes_by_meal_type(meal_type)
    if recipe_filter is not None:
        recipes = recipe_filter(recipes, context)
    return picker.pick(recipes)

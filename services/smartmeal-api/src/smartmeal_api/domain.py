"""Core domain types for recipes, profiles and generated menus"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    SNACK = "snack"
    DINNER = "dinner"


class MenuStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class Goal(str, Enum):
    LOSE_WEIGHT = "lose_weight"
    MAINTAIN = "maintain"
    GAIN_MUSCLE = "gain_muscle"
    GAIN_WEIGHT = "gain_weight"


class DietType(str, Enum):
    OMNIVORE = "omnivore"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    KETO = "keto"
    PALEO = "paleo"
    MEDITERRANEAN = "mediterranean"


class Recipe(BaseModel):
    """A catalog recipe. Calories are per serving."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    calories: int = Field(..., gt=0)
    servings: int = Field(1, ge=1)
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    prep_time: int = Field(0, ge=0)  # minutes
    cook_time: int = Field(0, ge=0)  # minutes
    meal_type: MealType
    tags: list[str] = Field(default_factory=list)


class Meal(BaseModel):
    """One recipe scheduled on a date, scaled by servings."""

    id: str
    recipe: Recipe
    date: date
    meal_type: MealType
    servings: int = Field(..., ge=1)

    @property
    def calories(self) -> int:
        return self.recipe.calories * self.servings


class DayMenu(BaseModel):
    """The meals of one calendar date.

    total_calories always equals the sum of recipe.calories * servings over
    the meals; call recalculate() after changing any meal.
    """

    date: date
    meals: list[Meal] = Field(default_factory=list)
    total_calories: int = 0

    def recalculate(self) -> int:
        self.total_calories = sum(meal.calories for meal in self.meals)
        return self.total_calories


class NewWeeklyMenu(BaseModel):
    """A generated menu that has not been stored yet"""

    user_id: str
    name: str
    start_date: date
    end_date: date
    days: list[DayMenu]
    status: MenuStatus = MenuStatus.PENDING
    total_days: int
    meals_per_day: list[MealType]
    max_calories_per_day: int
    servings_per_meal: int


class WeeklyMenu(NewWeeklyMenu):
    """A stored menu"""

    id: str
    created_at: datetime
    updated_at: datetime

    def find_meal(self, meal_id: str) -> Meal | None:
        for day in self.days:
            for meal in day.meals:
                if meal.id == meal_id:
                    return meal
        return None


class MenuGenerationRequest(BaseModel):
    """Parameters for a new menu.

    Ranges are checked by the generator so that every caller gets the same
    rules, not only the HTTP layer.
    """

    start_date: date
    days: int
    meals_per_day: list[MealType]
    max_calories_per_day: int
    servings: int


class UserProfile(BaseModel):
    """Onboarding profile of a user"""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    age: int
    gender: Gender
    weight: float  # kg
    height: float  # cm
    activity_level: ActivityLevel
    goal: Goal = Goal.MAINTAIN
    diet_type: DietType = DietType.OMNIVORE
    restrictions: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    favorite_ingredients: list[str] = Field(default_factory=list)
    disliked_ingredients: list[str] = Field(default_factory=list)
    max_daily_calories: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MenuStats(BaseModel):
    total_menus: int
    active_menus: int
    completed_menus: int
    total_meals: int


class OnboardingStep(BaseModel):
    step: int
    title: str
    completed: bool = False
